"""
Quote Matching

Resolves which shipment each rate quote belongs to.

THREE-STAGE FALLBACK
--------------------
First success wins, exact equality only:
    1. quoted_tracking_id == shipment tracking_id
    2. quoted_shipment_id == shipment_id
    3. shipment_index is a valid position in the shipment input

Quotes that fail every stage are excluded from all aggregates and reported
in MatchReport. When an identifier repeats across shipments, the first
shipment carrying it wins.

Positional matching assumes the shipment order did not change between upload
and quoting. It is kept for older imports without stable identifiers.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import polars as pl

from .columns import MATCHED_SHIPMENT_COLS
from .models import RateQuote, ShipmentRecord, present_id, quotes_frame, shipments_frame


logger = logging.getLogger(__name__)

MATCH_TRACKING_ID = "tracking_id"
MATCH_ID = "id"
MATCH_INDEX = "index"


@dataclass(frozen=True)
class MatchReport:
    """Diagnostic counters for one matching run."""

    total_quotes: int = 0
    matched_quotes: int = 0
    unmatched_quotes: int = 0
    rejected_quotes: int = 0
    matched_by_tracking_id: int = 0
    matched_by_id: int = 0
    matched_by_index: int = 0
    unmatched_quote_indices: tuple[int, ...] = ()

    @property
    def match_rate(self) -> float:
        """Matched quotes as a percentage of all quotes (0 without quotes)."""
        if self.total_quotes == 0:
            return 0.0
        return self.matched_quotes / self.total_quotes * 100


# =============================================================================
# SINGLE QUOTE
# =============================================================================

def match_quote(
    quote: RateQuote,
    shipments: Sequence[ShipmentRecord],
) -> ShipmentRecord | None:
    """Return the shipment a quote belongs to, or None if nothing matches."""
    tracking_id = present_id(quote.quoted_tracking_id)
    if tracking_id is not None:
        for shipment in shipments:
            if present_id(shipment.tracking_id) == tracking_id:
                return shipment

    shipment_id = present_id(quote.quoted_shipment_id)
    if shipment_id is not None:
        for shipment in shipments:
            if present_id(shipment.id) == shipment_id:
                return shipment

    # 0 is a valid position
    index = quote.shipment_index
    if index is not None and 0 <= index < len(shipments):
        return shipments[index]

    return None


# =============================================================================
# VECTORIZED
# =============================================================================

def match_quotes(
    quotes: pl.DataFrame | Sequence[RateQuote],
    shipments: pl.DataFrame | Sequence[ShipmentRecord],
) -> tuple[pl.DataFrame, MatchReport]:
    """
    Match every quote to a shipment.

    Args:
        quotes: Quote frame or RateQuote sequence
        shipments: Shipment frame or ShipmentRecord sequence

    Returns:
        (matched, report) where matched holds one row per matched quote with
        the quote columns, MATCHED_SHIPMENT_COLS and match_method, in quote
        input order.
    """
    quotes = quotes_frame(quotes)
    shipments = shipments_frame(shipments)
    total = quotes.height

    valid = quotes.filter(
        pl.col("account_name").is_not_null() &
        pl.col("rate_amount").is_not_null() &
        pl.col("rate_amount").is_not_nan() &
        (pl.col("rate_amount") >= 0)
    )
    rejected = total - valid.height
    if rejected:
        logger.warning(
            "Rejected %d quote(s) with a missing account or a missing, NaN or negative rate",
            rejected,
        )

    df = _resolve_positions(valid, shipments)

    unmatched = df.filter(pl.col("shipment_position").is_null())
    unmatched_indices = unmatched["quote_index"].to_list()
    if unmatched_indices:
        logger.warning(
            "%d of %d quote(s) could not be matched to a shipment",
            len(unmatched_indices), total,
        )
        logger.debug("Unmatched quote indices: %s", unmatched_indices)

    matched = (
        df.filter(pl.col("shipment_position").is_not_null())
        .join(shipments.select(MATCHED_SHIPMENT_COLS), on="shipment_position", how="left")
        .sort("quote_index")
    )

    methods = matched["match_method"]
    report = MatchReport(
        total_quotes=total,
        matched_quotes=matched.height,
        unmatched_quotes=len(unmatched_indices),
        rejected_quotes=rejected,
        matched_by_tracking_id=int((methods == MATCH_TRACKING_ID).sum()),
        matched_by_id=int((methods == MATCH_ID).sum()),
        matched_by_index=int((methods == MATCH_INDEX).sum()),
        unmatched_quote_indices=tuple(unmatched_indices),
    )
    logger.debug(
        "Matched %d quote(s): %d by tracking id, %d by id, %d by index",
        report.matched_quotes,
        report.matched_by_tracking_id,
        report.matched_by_id,
        report.matched_by_index,
    )

    return matched, report


def _resolve_positions(quotes: pl.DataFrame, shipments: pl.DataFrame) -> pl.DataFrame:
    """Attach shipment_position and match_method using the fallback chain."""
    by_tracking = (
        shipments
        .filter(pl.col("tracking_id").is_not_null())
        .unique(subset="tracking_id", keep="first", maintain_order=True)
        .select([
            pl.col("tracking_id").alias("quoted_tracking_id"),
            pl.col("shipment_position").alias("_pos_tracking"),
        ])
    )
    by_id = (
        shipments
        .filter(pl.col("shipment_id").is_not_null())
        .unique(subset="shipment_id", keep="first", maintain_order=True)
        .select([
            pl.col("shipment_id").alias("quoted_shipment_id"),
            pl.col("shipment_position").alias("_pos_id"),
        ])
    )
    last_position = shipments.height - 1

    return (
        quotes
        .join(by_tracking, on="quoted_tracking_id", how="left")
        .join(by_id, on="quoted_shipment_id", how="left")
        .with_columns(
            pl.when(pl.col("shipment_index").is_between(0, last_position))
            .then(pl.col("shipment_index"))
            .alias("_pos_index")
        )
        .with_columns([
            pl.coalesce("_pos_tracking", "_pos_id", "_pos_index").alias("shipment_position"),
            pl.when(pl.col("_pos_tracking").is_not_null()).then(pl.lit(MATCH_TRACKING_ID))
            .when(pl.col("_pos_id").is_not_null()).then(pl.lit(MATCH_ID))
            .when(pl.col("_pos_index").is_not_null()).then(pl.lit(MATCH_INDEX))
            .alias("match_method"),
        ])
        .drop(["_pos_tracking", "_pos_id", "_pos_index"])
        .sort("quote_index")
    )
