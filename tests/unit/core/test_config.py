"""Tests for settings schema and loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from routeatlas.contracts import Dialect
from routeatlas.core.config import (
    DEFAULT_EXTENSIONS,
    AtlasSettings,
    ImpactSettings,
    ResolutionSettings,
    load_settings,
)


class TestSettingsSchema:
    """Pydantic models."""

    def test_defaults(self) -> None:
        settings = AtlasSettings()
        assert settings.routes_file is None
        assert settings.dialect is None
        assert settings.resolution.max_import_depth == 3
        assert settings.resolution.extensions == DEFAULT_EXTENSIONS
        assert settings.impact.max_depth == 3
        assert settings.catalog is None

    def test_auto_dialect_means_detect(self) -> None:
        assert AtlasSettings(dialect="auto").dialect is None  # type: ignore[arg-type]
        assert AtlasSettings(dialect="AUTO").dialect is None  # type: ignore[arg-type]

    def test_explicit_dialect(self) -> None:
        assert AtlasSettings(dialect="angular-router").dialect is Dialect.ANGULAR_ROUTER  # type: ignore[arg-type]

    def test_unknown_dialect_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AtlasSettings(dialect="ember")  # type: ignore[arg-type]

    def test_extensions_must_start_with_dot(self) -> None:
        with pytest.raises(ValidationError, match="must be empty or start with"):
            ResolutionSettings(extensions=("", "ts"))

    def test_extensions_must_be_unique(self) -> None:
        with pytest.raises(ValidationError, match="unique"):
            ResolutionSettings(extensions=(".ts", ".ts"))

    def test_negative_import_depth_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ResolutionSettings(max_import_depth=-1)

    def test_zero_impact_depth_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ImpactSettings(max_depth=0)

    def test_settings_are_frozen(self) -> None:
        settings = AtlasSettings()
        with pytest.raises(ValidationError):
            settings.catalog = Path("x.json")  # type: ignore[misc]


class TestLoadSettings:
    """Dynaconf-based loading."""

    def test_load_from_yaml_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "routeatlas.yaml"
        config_file.write_text("""
routes_file: src/router/routes.tsx
dialect: vue-router
resolution:
  max_import_depth: 5
  extensions: ["", ".ts", ".vue"]
impact:
  max_depth: 2
catalog: .screenbook/screens.json
""")
        settings = load_settings(config_file)
        assert settings.routes_file == Path("src/router/routes.tsx")
        assert settings.dialect is Dialect.VUE_ROUTER
        assert settings.resolution.max_import_depth == 5
        assert settings.resolution.extensions == ("", ".ts", ".vue")
        assert settings.impact.max_depth == 2
        assert settings.catalog == Path(".screenbook/screens.json")

    def test_auto_dialect_in_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "routeatlas.yaml"
        config_file.write_text("dialect: auto\n")
        assert load_settings(config_file).dialect is None

    def test_load_with_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "routeatlas.yaml"
        config_file.write_text("""
resolution:
  max_import_depth: 2
""")
        # Environment variable should override YAML
        monkeypatch.setenv("ROUTEATLAS_RESOLUTION__MAX_IMPORT_DEPTH", "4")

        settings = load_settings(config_file)
        assert settings.resolution.max_import_depth == 4

    def test_env_only(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ROUTEATLAS_IMPACT__MAX_DEPTH", "6")
        assert load_settings().impact.max_depth == 6

    def test_env_var_expansion(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "routeatlas.yaml"
        config_file.write_text("""
routes_file: "${APP_ROUTES:-src/default.tsx}"
catalog: "${APP_CATALOG:-screens.json}"
""")
        monkeypatch.setenv("APP_ROUTES", "src/custom.tsx")
        monkeypatch.delenv("APP_CATALOG", raising=False)

        settings = load_settings(config_file)
        assert settings.routes_file == Path("src/custom.tsx")
        assert settings.catalog == Path("screens.json")

    def test_load_validates_schema(self, tmp_path: Path) -> None:
        config_file = tmp_path / "routeatlas.yaml"
        config_file.write_text("""
impact:
  max_depth: 0
""")
        with pytest.raises(ValidationError):
            load_settings(config_file)

    def test_load_missing_file_raises_file_not_found(self, tmp_path: Path) -> None:
        missing_file = tmp_path / "nonexistent.yaml"
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_settings(missing_file)
