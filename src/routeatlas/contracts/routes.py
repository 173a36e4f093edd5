"""Dialect-neutral route tree and flattened route types.

All types are frozen: route trees are built fresh per parse and never mutated
afterwards, and flat routes are immutable once the flattener emits them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from routeatlas.contracts.diagnostics import Diagnostic
from routeatlas.contracts.enums import Dialect


@dataclass(frozen=True, slots=True)
class ComponentRef:
    """Reference to the component a route renders.

    At least one of name/path is set. ``path`` is the resolved module path
    (absolute when it could be re-based onto the routes file's directory),
    ``lazy`` marks references that come from a dynamic-import thunk and
    ``lazy_children`` those that load a whole child route module.
    """

    name: str | None = None
    path: str | None = None
    lazy: bool = False
    lazy_children: bool = False

    def __post_init__(self) -> None:
        if self.name is None and self.path is None:
            raise ValueError("ComponentRef needs a name or a path")

    @property
    def display(self) -> str:
        """Short label: the identifier when known, otherwise the module path."""
        if self.name is not None:
            return self.name
        return self.path or ""


@dataclass(frozen=True, slots=True)
class RawRouteNode:
    """One route declaration before flattening.

    ``path is None`` means the declaration carries no path at all (a layout
    wrapper); ``path == ""`` is an index route that reuses its parent's path.
    """

    path: str | None = None
    redirect: str | None = None
    component: ComponentRef | None = None
    children: tuple[RawRouteNode, ...] = ()
    name: str | None = None
    line: int | None = None

    @property
    def is_pure_redirect(self) -> bool:
        """Path plus redirect target, nothing rendered."""
        return self.redirect is not None and self.component is None

    @property
    def is_meaningful(self) -> bool:
        return self.path is not None or bool(self.children)


@dataclass(frozen=True, slots=True)
class FlatRoute:
    """A single navigable target with its canonical absolute path."""

    full_path: str
    screen_id: str
    screen_title: str
    component: ComponentRef | None
    depth: int
    source: RawRouteNode = field(repr=False, compare=False)

    @property
    def name(self) -> str | None:
        return self.source.name


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Output of a dialect front-end: route tree plus accumulated diagnostics."""

    dialect: Dialect
    routes: tuple[RawRouteNode, ...]
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def warnings(self) -> tuple[Diagnostic, ...]:
        """Alias kept for callers that think of diagnostics as warnings."""
        return self.diagnostics
