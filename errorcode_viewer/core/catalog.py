"""
Brand/model catalog loading and dataset path resolution.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from .exceptions import MalformedSourceError, SourceUnavailableError
from .models import CatalogBrand, ErrorRecord

logger = logging.getLogger(__name__)


def parse_catalog(content: Union[bytes, str, list[Any]]) -> list[CatalogBrand]:
    """
    Parse a folder-listing document into brands and their models.

    Only each entry's ``name`` and its nested ``folders[].name`` are read.

    Args:
        content: Raw JSON text/bytes or an already-decoded list

    Returns:
        Brands in listing order
    """
    if isinstance(content, (bytes, str)):
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise MalformedSourceError(f"Catalog is not valid JSON: {exc}") from exc
    else:
        data = content

    if not isinstance(data, list):
        raise MalformedSourceError("Catalog must be a list of brand entries")

    brands = []
    for entry in data:
        if not isinstance(entry, dict) or not entry.get("name"):
            continue

        models = [
            str(folder["name"])
            for folder in entry.get("folders") or []
            if isinstance(folder, dict) and folder.get("name")
        ]
        brands.append(CatalogBrand(name=str(entry["name"]), models=models))

    return brands


def load_catalog(path: Path | str) -> list[CatalogBrand]:
    """Read and parse a catalog file."""
    path = Path(path)
    try:
        content = path.read_bytes()
    except OSError as exc:
        raise SourceUnavailableError(f"Cannot read catalog {path}: {exc}") from exc

    brands = parse_catalog(content)
    logger.info("Loaded catalog with %d brand(s) from %s", len(brands), path)
    return brands


def find_brand(catalog: list[CatalogBrand], name: str) -> Optional[CatalogBrand]:
    """Case-insensitive brand lookup."""
    wanted = name.strip().casefold()
    for brand in catalog:
        if brand.name.casefold() == wanted:
            return brand
    return None


def resolve_dataset_path(
    root: Path | str,
    brand: str,
    model: str,
    filename: str = "errores.json"
) -> Path:
    """Case-normalized location of a brand/model dataset."""
    return Path(root) / brand.strip().casefold() / model.strip().casefold() / filename


def parse_records(content: Union[bytes, str, list[Any]]) -> list[ErrorRecord]:
    """Parse a JSON array of error records in the wire format."""
    if isinstance(content, (bytes, str)):
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise MalformedSourceError(f"Error database is not valid JSON: {exc}") from exc
    else:
        data = content

    if not isinstance(data, list):
        raise MalformedSourceError("Error database must be a list of records")
    return [ErrorRecord.from_dict(item) for item in data if isinstance(item, dict)]


def load_records(path: Path | str) -> list[ErrorRecord]:
    """Read a local error database or per-model dataset."""
    path = Path(path)
    try:
        content = path.read_bytes()
    except OSError as exc:
        raise SourceUnavailableError(f"Cannot read error database {path}: {exc}") from exc

    records = parse_records(content)
    logger.info("Loaded %d record(s) from %s", len(records), path)
    return records
