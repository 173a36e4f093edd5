"""Dialect front-ends and the routes-file entry point.

Each Dialect maps to exactly one FrontEnd; dispatch is a registry lookup.
``parse_routes_file`` is the single way into the engine for a routes file:
it reads and parses the module, builds the resolution scope, runs the
dialect's root discovery and returns routes plus diagnostics.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

import structlog

from routeatlas.contracts.diagnostics import Diagnostic
from routeatlas.contracts.enums import Dialect
from routeatlas.contracts.errors import RouteParseError
from routeatlas.contracts.routes import ParseResult
from routeatlas.core.config import DEFAULT_EXTENSIONS
from routeatlas.dialects import angular_router, react_router, solid_router, tanstack_router, vue_router
from routeatlas.dialects.common import FrontEnd
from routeatlas.engine.imports import ImportResolver
from routeatlas.engine.resolver import ExpressionResolver, ImportCache, ResolutionContext
from routeatlas.parsing.parser import is_jsx_path, parse_module
from routeatlas.parsing.tokenizer import SourceSyntaxError

logger = structlog.get_logger(__name__)

FRONT_ENDS: dict[Dialect, FrontEnd] = {
    front_end.dialect: front_end
    for front_end in (
        react_router.FRONT_END,
        vue_router.FRONT_END,
        angular_router.FRONT_END,
        solid_router.FRONT_END,
        tanstack_router.FRONT_END,
    )
}

# Most specific markers first: TanStack and Solid files also match React patterns
DETECTION_ORDER: tuple[Dialect, ...] = (
    Dialect.TANSTACK_ROUTER,
    Dialect.SOLID_ROUTER,
    Dialect.ANGULAR_ROUTER,
    Dialect.REACT_ROUTER,
    Dialect.VUE_ROUTER,
)

FALLBACK_DIALECT = Dialect.REACT_ROUTER


def get_front_end(dialect: Dialect) -> FrontEnd:
    return FRONT_ENDS[dialect]


def detect_dialect(content: str) -> Dialect | None:
    """Guess the dialect of a routes file from textual markers."""
    for dialect in DETECTION_ORDER:
        if FRONT_ENDS[dialect].detect(content):
            return dialect
    return None


def parse_routes_source(
    source: str,
    file_path: Path | str,
    *,
    dialect: Dialect | None = None,
    cache: ImportCache | None = None,
    max_depth: int = 3,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> ParseResult:
    """Parse routes-file text that has already been read.

    ``file_path`` anchors relative imports. Pass a shared ``cache`` to reuse
    resolved imports across files of one run; by default each call gets a
    fresh one.

    Raises:
        RouteParseError: If the text cannot be tokenized or parsed
    """
    path = Path(os.path.abspath(file_path))
    diagnostics: list[Diagnostic] = []
    if dialect is None:
        dialect = detect_dialect(source)
        if dialect is None:
            dialect = FALLBACK_DIALECT
            diagnostics.append(
                Diagnostic.general(f"Could not detect the router dialect of \"{path}\"; parsing it as {dialect.value}.")
            )
    front_end = FRONT_ENDS[dialect]

    try:
        module = parse_module(source, jsx=is_jsx_path(path.name))
    except SourceSyntaxError as e:
        raise RouteParseError.syntax_failure(path, str(e), e.line) from e

    context = ResolutionContext.for_module(
        module,
        path,
        cache=cache if cache is not None else ImportCache(),
        max_depth=max_depth,
        extensions=tuple(extensions),
    )
    imports = ImportResolver()
    resolver = ExpressionResolver(context, front_end.parse_object, imports=imports, diagnostics=diagnostics)
    routes = front_end.extract(module, resolver)
    if not routes:
        resolver.warn(front_end.no_routes_message)

    logger.info(
        "routes_parsed",
        file=str(path),
        dialect=dialect.value,
        routes=len(routes),
        diagnostics=len(diagnostics),
        imported_files=imports.files_parsed,
    )
    return ParseResult(dialect=dialect, routes=tuple(routes), diagnostics=tuple(diagnostics))


def parse_routes_file(
    file_path: Path | str,
    *,
    content: str | None = None,
    dialect: Dialect | None = None,
    cache: ImportCache | None = None,
    max_depth: int = 3,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> ParseResult:
    """Read and parse a routes file.

    ``content`` bypasses the filesystem read (editor buffers, tests).

    Raises:
        RouteParseError: If the file cannot be read, tokenized or parsed
    """
    path = Path(os.path.abspath(file_path))
    if content is None:
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise RouteParseError.read_failure(path, str(e)) from e
    return parse_routes_source(
        content,
        path,
        dialect=dialect,
        cache=cache,
        max_depth=max_depth,
        extensions=extensions,
    )


__all__ = [
    "DETECTION_ORDER",
    "FRONT_ENDS",
    "FrontEnd",
    "detect_dialect",
    "get_front_end",
    "parse_routes_file",
    "parse_routes_source",
]
