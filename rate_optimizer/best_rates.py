"""
Best Rate Reduction

Collapses all quotes for the same (account_name, shipment_key) to the single
cheapest one. Must run before any aggregation: an account quoting several
service codes for one shipment would otherwise be counted once per quote.

Ties on rate_amount keep the quote seen first (lowest quote_index). Output
rows keep the first-seen order of their (account, shipment) key.
"""

import logging

import polars as pl


logger = logging.getLogger(__name__)

BEST_RATE_KEYS = ["account_name", "shipment_key"]


def reduce_best_rates(matched: pl.DataFrame) -> pl.DataFrame:
    """
    Keep the lowest quote per (account_name, shipment_key).

    Args:
        matched: Output of match_quotes()

    Returns:
        DataFrame with one row per (account_name, shipment_key), the matched
        columns of the winning quote, and quote_count (quotes collapsed).
    """
    first_seen = pl.col("quote_index").min()

    reduced = (
        matched
        .group_by(BEST_RATE_KEYS, maintain_order=True)
        .agg([
            pl.all().sort_by(["rate_amount", "quote_index"]).first(),
            pl.len().cast(pl.Int64).alias("quote_count"),
            first_seen.alias("_first_seen"),
        ])
        .sort("_first_seen")
        .drop("_first_seen")
    )

    collapsed = matched.height - reduced.height
    if collapsed:
        logger.debug("Collapsed %d duplicate quote(s) into best rates", collapsed)

    return reduced.select(
        [c for c in matched.columns if c in reduced.columns] + ["quote_count"]
    )
