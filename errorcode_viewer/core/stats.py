"""
Aggregate statistics over error records.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import pandas as pd

from .models import ErrorRecord

logger = logging.getLogger(__name__)


def _group_counts(df: pd.DataFrame, key: str) -> pd.DataFrame:
    """Row counts per key value, largest first (ties keep first-seen order)."""
    counts = df.groupby(key, sort=False).size().reset_index(name="count")
    return counts.sort_values("count", ascending=False, kind="stable")


def summarize_records(
    records: list[ErrorRecord],
    last_update: Optional[str] = None
) -> dict[str, Any]:
    """
    Compute the statistics view for a set of records.

    The result has the same shape as the server's stats endpoint so both
    data sources feed the same charts.

    Args:
        records: Error records to summarize
        last_update: Timestamp to report; defaults to the newest updatedAt

    Returns:
        Dictionary with totalErrors, totalBrands, lastUpdate, errorsByBrand
        and errorsBySeverity
    """
    if not records:
        return {
            "totalErrors": 0,
            "totalBrands": 0,
            "lastUpdate": last_update,
            "errorsByBrand": [],
            "errorsBySeverity": []
        }

    df = pd.DataFrame([
        {
            "brand": r.brand,
            "brandName": r.brand_name or r.brand,
            "severity": r.severity,
            "updatedAt": r.updated_at or r.created_at or ""
        }
        for r in records
    ])

    by_brand = _group_counts(df, "brand")
    brand_names = df.drop_duplicates("brand").set_index("brand")["brandName"]
    errors_by_brand = [
        {"_id": row["brand"], "brandName": brand_names[row["brand"]], "count": int(row["count"])}
        for row in by_brand.to_dict("records")
    ]

    by_severity = _group_counts(df, "severity")
    errors_by_severity = [
        {"_id": row["severity"], "count": int(row["count"])}
        for row in by_severity.to_dict("records")
    ]

    if last_update is None:
        stamps = df.loc[df["updatedAt"] != "", "updatedAt"]
        last_update = stamps.max() if not stamps.empty else None

    logger.debug("Summarized %d record(s) over %d brand(s)", len(df), len(by_brand))
    return {
        "totalErrors": len(df),
        "totalBrands": int(df["brand"].nunique()),
        "lastUpdate": last_update,
        "errorsByBrand": errors_by_brand,
        "errorsBySeverity": errors_by_severity
    }
