"""Screen catalog loading.

A catalog is a JSON or YAML document holding either a list of screens or an
object with a ``screens`` list, as produced by the screen catalog generator.
"""

import json
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import TypeAdapter, ValidationError

from routeatlas.contracts.errors import CatalogError
from routeatlas.contracts.screens import Screen

logger = structlog.get_logger(__name__)

_SCREENS_ADAPTER = TypeAdapter(list[Screen])


def parse_catalog(data: Any) -> list[Screen]:
    """Validate already-decoded catalog data into screens."""
    if isinstance(data, dict):
        if "screens" not in data:
            raise CatalogError("Catalog object has no 'screens' list")
        data = data["screens"]
    if not isinstance(data, list):
        raise CatalogError(f"Catalog must be a list of screens, got {type(data).__name__}")
    try:
        screens = _SCREENS_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise CatalogError(f"Invalid screen catalog: {e}") from e

    seen: set[str] = set()
    for screen in screens:
        if screen.id in seen:
            raise CatalogError(f"Duplicate screen id in catalog: {screen.id!r}")
        seen.add(screen.id)
    return screens


def load_catalog(path: Path) -> list[Screen]:
    """Read and validate a screen catalog file.

    Raises:
        CatalogError: If the file is unreadable, undecodable or invalid
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CatalogError(f"Failed to read screen catalog \"{path}\": {e}") from e

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise CatalogError(f"Failed to decode screen catalog \"{path}\": {e}") from e

    screens = parse_catalog(data)
    logger.info("catalog_loaded", path=str(path), screens=len(screens))
    return screens
