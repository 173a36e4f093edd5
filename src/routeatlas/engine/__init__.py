"""Resolution, flattening and navigation graph algorithms."""
