"""Infrastructure shared by the engine and the CLI: logging, settings, paths, catalog I/O."""
