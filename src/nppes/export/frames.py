"""
Tabular views of providers and counts.

Frames are built from records and count pairs returned by the public
store and query API, validated with Pandera, and written as CSV or JSON.
"""

from collections.abc import Iterable, Sequence
from pathlib import Path

import pandas as pd

from nppes.models.records import ProviderRecord
from nppes.schemas.frames import CountFrameSchema, ProviderFrameSchema
from nppes.utils.logging import get_logger

log = get_logger(__name__)

PROVIDER_COLUMNS = [
    "npi",
    "entity_type",
    "name",
    "state",
    "city",
    "postal_code",
    "primary_taxonomy",
    "taxonomy_count",
    "enumeration_date",
    "last_update_date",
    "deactivation_date",
    "active",
]

_DATE_COLUMNS = ["enumeration_date", "last_update_date", "deactivation_date"]


def _provider_row(record: ProviderRecord) -> dict[str, object]:
    mailing = record.mailing_address
    primary = record.primary_taxonomy
    return {
        "npi": str(record.npi),
        "entity_type": record.entity_type.code if record.entity_type else None,
        "name": record.display_name or None,
        "state": record.state,
        "city": mailing.city if mailing else None,
        "postal_code": mailing.postal_code if mailing else None,
        "primary_taxonomy": primary.code if primary else None,
        "taxonomy_count": len(record.taxonomies),
        "enumeration_date": record.enumeration_date,
        "last_update_date": record.last_update_date,
        "deactivation_date": record.deactivation_date,
        "active": record.is_active,
    }


def providers_frame(records: Iterable[ProviderRecord]) -> pd.DataFrame:
    """
    Build a validated one-row-per-provider DataFrame.

    Args:
        records: Provider records, e.g. a query result.

    Returns:
        DataFrame conforming to ProviderFrameSchema.
    """
    df = pd.DataFrame([_provider_row(r) for r in records], columns=PROVIDER_COLUMNS)
    for column in _DATE_COLUMNS:
        df[column] = pd.to_datetime(df[column])
    df["taxonomy_count"] = df["taxonomy_count"].astype("int64")
    df["active"] = df["active"].astype(bool)
    return ProviderFrameSchema.validate(df)


def counts_frame(pairs: Sequence[tuple[str, int]], key: str = "key") -> pd.DataFrame:
    """
    Build a validated frame of (key, count) pairs.

    Args:
        pairs: Pairs as returned by top_states / top_taxonomies.
        key: Name of the key column in the returned frame.

    Returns:
        DataFrame with columns ``key`` (renamed) and ``count``.
    """
    df = pd.DataFrame(list(pairs), columns=["key", "count"])
    df["count"] = df["count"].astype("int64")
    df = CountFrameSchema.validate(df)
    return df.rename(columns={"key": key}) if key != "key" else df


def write_frame(df: pd.DataFrame, path: Path) -> Path:
    """
    Write a frame as CSV or JSON, chosen by file suffix.

    JSON is written as a list of records with ISO dates.

    Raises:
        ValueError: If the suffix is neither .csv nor .json.
    """
    suffix = path.suffix.lower()
    path.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".csv":
        df.to_csv(path, index=False, date_format="%Y-%m-%d")
    elif suffix == ".json":
        df.to_json(path, orient="records", date_format="iso", indent=2)
    else:
        msg = f"Unsupported export format '{suffix}' (use .csv or .json)"
        raise ValueError(msg)
    log.info("Wrote frame", path=str(path), rows=len(df))
    return path
