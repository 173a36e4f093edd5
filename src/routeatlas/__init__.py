"""routeatlas: static route-configuration resolution and screen graph analysis.

Turns router declarations from several front-end dialects into a flat,
identifier-stable list of screens, and analyses the navigation graph those
screens declare.
"""

__version__ = "0.1.0"
