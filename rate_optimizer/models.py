"""
Record Types and Frame Builders

Shipments and quotes arrive either as plain records or as DataFrames. Both
are normalized into typed frames (see columns.py) before any calculation.

NORMALIZATION
-------------
    - Identifier columns: empty strings are treated as missing
    - shipment_id: cast to string (numeric and string ids compare equal)
    - current_rate: missing -> 0.0
    - service_type: missing -> UNKNOWN_SERVICE
    - shipment_key: tracking_id, else shipment_id
    - shipment_position / quote_index: position in the input
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import NewType

import polars as pl

from .columns import (
    QUOTE_SCHEMA,
    REQUIRED_QUOTE_COLS,
    REQUIRED_SHIPMENT_COLS,
    SHIPMENT_SCHEMA,
    validate_columns,
)
from .reference import UNKNOWN_SERVICE


AccountId = NewType("AccountId", str)


# =============================================================================
# RECORDS
# =============================================================================

@dataclass(frozen=True)
class ShipmentRecord:
    """One row per physical shipment being analyzed."""

    id: str | int
    current_rate: float
    service_type: str
    tracking_id: str | None = None
    weight: float = 0.0
    shipment_index: int | None = None
    account_used: AccountId | None = None

    @property
    def key(self) -> str:
        """Join key shared by matching, reduction and assignment."""
        return present_id(self.tracking_id) or str(self.id)


@dataclass(frozen=True)
class RateQuote:
    """
    One quote for a (shipment, carrier account, service).

    quoted_tracking_id / quoted_shipment_id are the denormalized copy of the
    originating shipment's identifiers returned by the quoting service.
    """

    account_name: AccountId
    rate_amount: float
    shipment_index: int | None = None
    carrier_type: str = ""
    service_code: str = ""
    service_name: str | None = None
    is_negotiated: bool = False
    quoted_tracking_id: str | None = None
    quoted_shipment_id: str | int | None = None


# =============================================================================
# IDENTIFIERS
# =============================================================================

def present_id(value: str | int | None) -> str | None:
    """Identifier as a string, or None when missing or blank."""
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


# =============================================================================
# FRAME BUILDERS
# =============================================================================

def shipments_frame(shipments: pl.DataFrame | Sequence[ShipmentRecord]) -> pl.DataFrame:
    """
    Build the normalized shipment frame.

    Args:
        shipments: DataFrame with shipment columns, or ShipmentRecord sequence

    Returns:
        DataFrame with SHIPMENT_SCHEMA columns plus shipment_key and
        shipment_position. Extra input columns are kept.
    """
    if not isinstance(shipments, pl.DataFrame):
        shipments = pl.DataFrame(
            {
                "shipment_id": [str(s.id) for s in shipments],
                "tracking_id": [s.tracking_id for s in shipments],
                "current_rate": [s.current_rate for s in shipments],
                "weight": [s.weight for s in shipments],
                "service_type": [s.service_type for s in shipments],
                "shipment_index": [s.shipment_index for s in shipments],
                "account_used": [s.account_used for s in shipments],
            },
            schema=SHIPMENT_SCHEMA,
        )

    validate_columns(shipments, REQUIRED_SHIPMENT_COLS, "Shipments")
    df = _conform(shipments.drop(["shipment_key", "shipment_position"], strict=False), SHIPMENT_SCHEMA)

    df = df.with_columns([
        _blank_to_null("shipment_id"),
        _blank_to_null("tracking_id"),
        _blank_to_null("account_used"),
        pl.col("current_rate").fill_null(0.0),
        pl.col("weight").fill_null(0.0),
        _blank_to_null("service_type").fill_null(UNKNOWN_SERVICE),
    ])

    return df.with_columns(
        pl.coalesce("tracking_id", "shipment_id").alias("shipment_key")
    ).with_row_index("shipment_position").with_columns(
        pl.col("shipment_position").cast(pl.Int64)
    )


def quotes_frame(quotes: pl.DataFrame | Sequence[RateQuote]) -> pl.DataFrame:
    """
    Build the normalized quote frame.

    Args:
        quotes: DataFrame with quote columns, or RateQuote sequence

    Returns:
        DataFrame with QUOTE_SCHEMA columns plus quote_index.
    """
    if not isinstance(quotes, pl.DataFrame):
        quotes = pl.DataFrame(
            {
                "shipment_index": [q.shipment_index for q in quotes],
                "account_name": [q.account_name for q in quotes],
                "carrier_type": [q.carrier_type for q in quotes],
                "service_code": [q.service_code for q in quotes],
                "service_name": [q.service_name for q in quotes],
                "rate_amount": [q.rate_amount for q in quotes],
                "is_negotiated": [q.is_negotiated for q in quotes],
                "quoted_tracking_id": [q.quoted_tracking_id for q in quotes],
                "quoted_shipment_id": [
                    None if q.quoted_shipment_id is None else str(q.quoted_shipment_id)
                    for q in quotes
                ],
            },
            schema=QUOTE_SCHEMA,
        )

    validate_columns(quotes, REQUIRED_QUOTE_COLS, "Quotes")
    df = _conform(quotes.drop("quote_index", strict=False), QUOTE_SCHEMA)

    df = df.with_columns([
        _blank_to_null("account_name"),
        _blank_to_null("quoted_tracking_id"),
        _blank_to_null("quoted_shipment_id"),
        pl.col("is_negotiated").fill_null(False),
    ])

    return df.with_row_index("quote_index").with_columns(
        pl.col("quote_index").cast(pl.Int64)
    )


def shipment_records(df: pl.DataFrame) -> list[ShipmentRecord]:
    """Convert a shipment frame back into records."""
    return [
        ShipmentRecord(
            id=row["shipment_id"],
            current_rate=row["current_rate"],
            service_type=row["service_type"],
            tracking_id=row["tracking_id"],
            weight=row["weight"],
            shipment_index=row["shipment_index"],
            account_used=row["account_used"],
        )
        for row in df.iter_rows(named=True)
    ]


# =============================================================================
# HELPERS
# =============================================================================

def _conform(df: pl.DataFrame, schema: dict) -> pl.DataFrame:
    """Add missing schema columns as nulls and cast to schema dtypes."""
    df = df.with_columns([
        pl.lit(None, dtype=dtype).alias(col)
        for col, dtype in schema.items()
        if col not in df.columns
    ])
    extras = [c for c in df.columns if c not in schema]
    return df.select(
        [pl.col(col).cast(dtype) for col, dtype in schema.items()] + extras
    )


def _blank_to_null(col: str) -> pl.Expr:
    """Treat empty / whitespace-only strings as missing."""
    return (
        pl.when(pl.col(col).str.strip_chars() == "")
        .then(pl.lit(None, dtype=pl.Utf8))
        .otherwise(pl.col(col))
        .alias(col)
    )
