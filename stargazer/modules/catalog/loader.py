"""
Catalog loader.

Reads catalog entries from YAML. The bundled sample catalog ships as
package data (``stargazer/data/catalog.yaml``); a custom file can be given
by path.

Expected document::

    objects:
      - id: sirius
        name: Sirius
        type: Star
        rarity: Common
        xp: 10
        image: "..."
        loot: [Stardust]
        lore: "..."
        stats: {distance: "8.6 light years"}

Any problem (unreadable file, YAML syntax, missing fields, unknown enum
values, duplicate ids) raises ``CatalogError``; an engine is never built on
a partial catalog.
"""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml

from stargazer.core.logging.logger import get_logger
from stargazer.domain.models.base import DomainValidationError
from stargazer.domain.models.catalog import Catalog, CatalogEntry
from stargazer.modules.shared.exceptions import CatalogError

logger = get_logger(__name__)

BUNDLED_CATALOG = "catalog.yaml"


def parse_catalog(document: Any, source: str = "<memory>") -> Catalog:
    """Build a Catalog from an already parsed YAML/JSON document."""
    if isinstance(document, dict):
        items = document.get("objects")
    else:
        items = document
    if not isinstance(items, list):
        raise CatalogError("expected a list of objects (or a mapping with an 'objects' list)", source)

    entries: List[CatalogEntry] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise CatalogError(f"object #{index} is not a mapping", source)
        try:
            entries.append(CatalogEntry.from_dict(item))
        except DomainValidationError as exc:
            raise CatalogError(f"object #{index} ({item.get('id', '?')}): {exc}", source) from exc

    try:
        catalog = Catalog(entries)
    except DomainValidationError as exc:
        raise CatalogError(str(exc), source) from exc

    if len(catalog) == 0:
        logger.warning("Catalog is empty; every exploration will report exhaustion", extra={"source": source})
    return catalog


def load_catalog(path: Optional[Union[str, Path]] = None) -> Catalog:
    """
    Load a catalog from ``path``, or the bundled sample catalog when None.

    Raises:
        CatalogError: The file cannot be read or its content is invalid.
    """
    if path is None:
        source = f"stargazer.data/{BUNDLED_CATALOG}"
        try:
            text = resources.files("stargazer.data").joinpath(BUNDLED_CATALOG).read_text(encoding="utf-8")
        except (OSError, ModuleNotFoundError) as exc:
            raise CatalogError(f"bundled catalog unavailable: {exc}", source) from exc
    else:
        source = str(path)
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise CatalogError(f"cannot read catalog file: {exc}", source) from exc

    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise CatalogError(f"invalid YAML: {exc}", source) from exc

    catalog = parse_catalog(document, source)
    logger.info("Catalog loaded", extra={"source": source, "entries": len(catalog)})
    return catalog
