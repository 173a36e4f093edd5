"""Settings schema and loading for routeatlas.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from routeatlas.contracts.enums import Dialect

DEFAULT_EXTENSIONS: tuple[str, ...] = ("", ".ts", ".tsx", ".js", ".jsx")


class ResolutionSettings(BaseModel):
    """Cross-file import resolution limits."""

    model_config = {"frozen": True}

    max_import_depth: int = Field(
        default=3,
        ge=0,
        description="Maximum chain length of imported route files followed from the entry file",
    )
    extensions: tuple[str, ...] = Field(
        default=DEFAULT_EXTENSIONS,
        description="Suffixes probed, in order, when locating an imported module",
    )

    @field_validator("extensions")
    @classmethod
    def validate_extensions(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        for ext in v:
            if ext and not ext.startswith("."):
                raise ValueError(f"Extension must be empty or start with '.': {ext!r}")
        if len(set(v)) != len(v):
            raise ValueError("Extensions must be unique")
        return v


class ImpactSettings(BaseModel):
    """Impact analysis bounds."""

    model_config = {"frozen": True}

    max_depth: int = Field(
        default=3,
        ge=1,
        description="Maximum navigation hops from a screen to a direct dependent",
    )


class AtlasSettings(BaseModel):
    """Top-level routeatlas settings.

    Example YAML:
        routes_file: src/router/routes.tsx
        dialect: auto
        resolution:
          max_import_depth: 3
        impact:
          max_depth: 3
        catalog: .screenbook/screens.json
    """

    model_config = {"frozen": True}

    routes_file: Path | None = Field(default=None, description="Default routes file to analyse")
    dialect: Dialect | None = Field(
        default=None,
        description="Router dialect; None (or 'auto' in YAML) means detect from content",
    )
    resolution: ResolutionSettings = Field(default_factory=ResolutionSettings)
    impact: ImpactSettings = Field(default_factory=ImpactSettings)
    catalog: Path | None = Field(default=None, description="Screen catalog JSON for cycles/impact")

    @field_validator("dialect", mode="before")
    @classmethod
    def validate_dialect(cls, v: Any) -> Any:
        if isinstance(v, str) and v.lower() == "auto":
            return None
        return v


_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Args:
        config: Configuration dict (may contain nested structures)

    Returns:
        New dict with environment variables expanded
    """
    import os

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            default = match.group(2)
            if default is not None:
                return default
            # Left as-is so validation reports the unexpanded value
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lower_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lower_keys(item) for item in value]
    return value


def load_settings(config_path: Path | None = None) -> AtlasSettings:
    """Load settings from a YAML file with environment variable overrides.

    Precedence, highest first:
    1. Environment variables (ROUTEATLAS_*, nested with ``__``)
    2. Config file
    3. Defaults from the Pydantic schema

    Args:
        config_path: Path to YAML configuration file, or None for env + defaults

    Returns:
        Validated AtlasSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="ROUTEATLAS",
        settings_files=[str(config_path)] if config_path is not None else [],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): _lower_keys(v) for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _expand_env_vars(raw_config)

    return AtlasSettings(**raw_config)
