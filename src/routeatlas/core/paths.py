"""Module-specifier to file-path resolution."""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

import structlog

from routeatlas.core.config import DEFAULT_EXTENSIONS

logger = structlog.get_logger(__name__)

_INDEX_STEM = "index"


def is_relative_specifier(specifier: str) -> bool:
    return specifier.startswith("./") or specifier.startswith("../") or specifier in (".", "..")


def resolve_import_path(specifier: str, base_dir: Path) -> Path | None:
    """Turn a module specifier into a candidate absolute path.

    Only relative specifiers and absolute paths map onto the filesystem; bare
    package specifiers (``react``, ``@/views/Home``) return None. The result
    is normalised but not probed for existence or extension.
    """
    if is_relative_specifier(specifier):
        return Path(os.path.normpath(base_dir / specifier))
    if specifier.startswith("/"):
        return Path(os.path.normpath(specifier))
    return None


def probe_module_file(candidate: Path, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> tuple[Path | None, list[Path]]:
    """Find the file a module path refers to.

    Tries each suffix in order, then ``<candidate>/index<ext>`` for every
    non-empty suffix. Only regular files match.

    Returns:
        (found file or None, every path tried in order)
    """
    tried: list[Path] = []
    for ext in extensions:
        probe = candidate.with_name(candidate.name + ext) if ext else candidate
        tried.append(probe)
        if probe.is_file():
            logger.debug("module_probe_hit", candidate=str(candidate), file=str(probe))
            return probe, tried
    for ext in extensions:
        if not ext:
            continue
        probe = candidate / f"{_INDEX_STEM}{ext}"
        tried.append(probe)
        if probe.is_file():
            logger.debug("module_probe_hit", candidate=str(candidate), file=str(probe))
            return probe, tried
    logger.debug("module_probe_miss", candidate=str(candidate), tried=len(tried))
    return None, tried


def rebase_specifier(specifier: str, base_dir: Path) -> str:
    """Re-base a dynamic-import argument onto the importing file's directory.

    Relative specifiers become absolute paths; anything else (package names,
    path aliases) is returned unchanged.
    """
    resolved = resolve_import_path(specifier, base_dir)
    return str(resolved) if resolved is not None else specifier
