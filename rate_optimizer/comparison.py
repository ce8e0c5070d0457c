"""
Shipment-Level Comparison

One row per shipment comparing every account's best rate: the cheapest
account, the spread between cheapest and most expensive quote, and the
savings the cheapest quote offers against the current cost.
"""

import polars as pl


def compare_shipments(best_rates: pl.DataFrame) -> pl.DataFrame:
    """
    Compare accounts per shipment.

    Args:
        best_rates: Output of reduce_best_rates()

    Returns:
        DataFrame in shipment input order with columns:
            - shipment_key, shipment_position, service_type, current_rate
            - best_account, best_service, best_rate (ties: first quote seen)
            - highest_rate, accounts_quoted
            - potential_savings: highest_rate - best_rate
            - best_savings: current_rate - best_rate
    """
    return (
        best_rates
        .sort(["shipment_position", "rate_amount", "quote_index"])
        .group_by("shipment_key", maintain_order=True)
        .agg([
            pl.col("shipment_position").first(),
            pl.col("service_type").first(),
            pl.col("current_rate").first(),
            pl.col("account_name").first().alias("best_account"),
            pl.coalesce("service_name", "service_code").first().alias("best_service"),
            pl.col("rate_amount").first().alias("best_rate"),
            pl.col("rate_amount").max().alias("highest_rate"),
            pl.len().cast(pl.Int64).alias("accounts_quoted"),
        ])
        .with_columns([
            (pl.col("highest_rate") - pl.col("best_rate")).alias("potential_savings"),
            (pl.col("current_rate") - pl.col("best_rate")).alias("best_savings"),
        ])
    )
