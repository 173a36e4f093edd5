"""Shared types for routeatlas.

Leaf package: contracts import nothing from the engine, parsing or dialect
layers, so every other layer can depend on it without import cycles.
"""

from routeatlas.contracts.diagnostics import Diagnostic
from routeatlas.contracts.enums import Dialect, DiagnosticKind, SpreadFailure
from routeatlas.contracts.errors import CatalogError, RouteParseError
from routeatlas.contracts.routes import ComponentRef, FlatRoute, ParseResult, RawRouteNode
from routeatlas.contracts.screens import Screen

__all__ = [
    "CatalogError",
    "ComponentRef",
    "Diagnostic",
    "DiagnosticKind",
    "Dialect",
    "FlatRoute",
    "ParseResult",
    "RawRouteNode",
    "RouteParseError",
    "Screen",
    "SpreadFailure",
]
