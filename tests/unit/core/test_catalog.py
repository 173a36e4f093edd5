"""Tests for screen catalog loading."""

import json
from pathlib import Path

import pytest

from routeatlas.contracts import CatalogError, Screen
from routeatlas.core.catalog import load_catalog, parse_catalog


class TestParseCatalog:
    """Decoded catalog data."""

    def test_list_of_screens(self) -> None:
        screens = parse_catalog([{"id": "home", "next": ["about"]}, {"id": "about"}])
        assert [s.id for s in screens] == ["home", "about"]
        assert screens[0].next == ("about",)

    def test_object_with_screens(self) -> None:
        screens = parse_catalog({"version": 1, "screens": [{"id": "home"}]})
        assert [s.id for s in screens] == ["home"]

    def test_camel_case_aliases(self) -> None:
        (screen,) = parse_catalog([{"id": "billing", "dependsOn": ["InvoiceAPI"], "allowCycles": True}])
        assert screen.depends_on == ("InvoiceAPI",)
        assert screen.allow_cycles is True

    def test_python_names_accepted(self) -> None:
        screen = Screen(id="x", depends_on=("A",), allow_cycles=True)
        assert screen.depends_on == ("A",)

    def test_unknown_fields_ignored(self) -> None:
        (screen,) = parse_catalog([{"id": "x", "entryPoints": ["/"], "tags": ["a"]}])
        assert screen.id == "x"

    def test_object_without_screens(self) -> None:
        with pytest.raises(CatalogError, match="no 'screens' list"):
            parse_catalog({"pages": []})

    def test_not_a_list(self) -> None:
        with pytest.raises(CatalogError, match="got str"):
            parse_catalog("home")

    def test_invalid_screen(self) -> None:
        with pytest.raises(CatalogError, match="Invalid screen catalog"):
            parse_catalog([{"id": ""}])

    def test_duplicate_ids(self) -> None:
        with pytest.raises(CatalogError, match="Duplicate screen id in catalog: 'home'"):
            parse_catalog([{"id": "home"}, {"id": "home"}])


class TestLoadCatalog:
    """Catalog files."""

    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "screens.json"
        path.write_text(json.dumps({"screens": [{"id": "a", "next": ["b"]}, {"id": "b"}]}))
        assert [s.id for s in load_catalog(path)] == ["a", "b"]

    def test_yaml_file(self, tmp_path: Path) -> None:
        path = tmp_path / "screens.yaml"
        path.write_text("""
- id: a
  route: /a
  owner: [billing]
- id: b
  next: [a]
""")
        screens = load_catalog(path)
        assert screens[0].owner == ("billing",)
        assert screens[1].next == ("a",)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(CatalogError, match="Failed to read screen catalog"):
            load_catalog(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "screens.json"
        path.write_text("{not json")
        with pytest.raises(CatalogError, match="Failed to decode screen catalog"):
            load_catalog(path)
