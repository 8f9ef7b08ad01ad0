from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict

from ..schema import DatasetSchema
from ..store import count_collections

DATA_VERSION = "1.0.0"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def reconcile_totals(schema: DatasetSchema, document: Dict[str, Any]) -> Dict[str, Any]:
    """Write the live collection counts into the document's metadata totals."""
    counts = count_collections(schema, document)
    metadata = document.setdefault(schema.sections.metadata, {})
    for field, counter in schema.totals:
        metadata[field] = counts[counter]
    return document


def top_by(records: Dict[str, Dict[str, Any]], key, n: int = 10):
    """Records sorted by a count, largest first; ties keep insertion order."""
    return sorted(records.values(), key=lambda r: -key(r))[:n]
