"""Shared test fixtures and helpers.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import logging
import os
import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
import structlog
from hypothesis import Phase, Verbosity, settings

from routeatlas.contracts import Dialect, ParseResult
from routeatlas.dialects import get_front_end, parse_routes_source
from routeatlas.engine.resolver import ExpressionResolver, ImportCache, ResolutionContext
from routeatlas.parsing import parse_module

type WriteSource = Callable[[str, str], Path]


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo logging configuration made by a test (the CLI configures it on every invocation)."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.WARNING)


@pytest.fixture
def write_source(tmp_path: Path) -> WriteSource:
    """Write dedented source text under tmp_path and return its path."""

    def _write(relative: str, text: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
        return path

    return _write


def make_resolver(
    source: str,
    *,
    dialect: Dialect = Dialect.REACT_ROUTER,
    file_path: Path | None = None,
    max_depth: int = 3,
    cache: ImportCache | None = None,
) -> ExpressionResolver:
    """Resolver over an in-memory module, bound to a dialect's object parser."""
    path = file_path or Path("/project/src/routes.tsx")
    module = parse_module(textwrap.dedent(source))
    context = ResolutionContext.for_module(module, path, cache=cache if cache is not None else ImportCache(), max_depth=max_depth)
    return ExpressionResolver(context, get_front_end(dialect).parse_object)


def parse_source(source: str, dialect: Dialect | None, *, file_name: str = "/project/src/routes.tsx") -> ParseResult:
    """Parse in-memory routes-file text as if it lived at ``file_name``."""
    return parse_routes_source(textwrap.dedent(source), file_name, dialect=dialect)


def route_paths(result: ParseResult) -> list[str | None]:
    """Top-level raw paths of a parse result."""
    return [route.path for route in result.routes]


def messages(result: ParseResult) -> list[str]:
    return [diagnostic.message for diagnostic in result.diagnostics]


# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
