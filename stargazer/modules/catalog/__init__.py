"""Catalog loading from YAML (bundled sample or a custom file)."""

from stargazer.modules.catalog.loader import load_catalog, parse_catalog

__all__ = ["load_catalog", "parse_catalog"]
