"""
Unit Tests for Catalog Loading

Test Coverage
-------------
- Bundled catalog loads and is well formed
- YAML files from disk
- Invalid content raises CatalogError
"""

import pytest

from stargazer.domain.models.catalog import ObjectType, Rarity
from stargazer.modules.catalog.loader import load_catalog, parse_catalog
from stargazer.modules.shared.exceptions import CatalogError

VALID_ITEM = {"id": "sun", "name": "Sun", "type": "Star", "rarity": "Common", "xp": 10}


@pytest.mark.unit
class TestBundledCatalog:
    def test_bundled_catalog_loads(self):
        catalog = load_catalog()

        assert len(catalog) == 18
        assert catalog.get("sun").type is ObjectType.STAR
        assert catalog.get("ton-618").rarity is Rarity.LEGENDARY

    def test_bundled_catalog_covers_every_rarity(self):
        catalog = load_catalog()

        assert {entry.rarity for entry in catalog} == set(Rarity)


@pytest.mark.unit
class TestParseCatalog:
    def test_accepts_mapping_or_list(self):
        assert parse_catalog({"objects": [VALID_ITEM]}).ids() == ["sun"]
        assert parse_catalog([VALID_ITEM]).ids() == ["sun"]

    def test_empty_catalog_is_allowed(self):
        assert len(parse_catalog([])) == 0

    @pytest.mark.parametrize(
        "document",
        [
            {"stars": []},
            ["not a mapping"],
            [{**VALID_ITEM, "rarity": "Mythic"}],
            [VALID_ITEM, dict(VALID_ITEM)],
        ],
    )
    def test_invalid_documents_raise(self, document):
        with pytest.raises(CatalogError) as exc_info:
            parse_catalog(document, source="test.yaml")

        assert exc_info.value.source == "test.yaml"
        assert exc_info.value.error_code == "CATALOG_INVALID"


@pytest.mark.unit
class TestLoadCatalogFromFile:
    def test_loads_yaml_file(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text(
            "objects:\n"
            "  - id: vega\n"
            "    name: Vega\n"
            "    type: Star\n"
            "    rarity: Rare\n"
            "    xp: 25\n",
            encoding="utf-8",
        )

        catalog = load_catalog(path)

        assert catalog.ids() == ["vega"]

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(CatalogError):
            load_catalog(tmp_path / "absent.yaml")

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("objects: [\n", encoding="utf-8")

        with pytest.raises(CatalogError):
            load_catalog(path)
