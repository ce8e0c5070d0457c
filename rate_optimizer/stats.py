"""
Savings Statistics

Shared per-row savings columns and per-group aggregations used by the
account and service aggregators. Every ratio has an explicit zero guard:
degenerate inputs produce 0, never NaN or inf.
"""

from collections.abc import Sequence

import polars as pl

from .columns import STAT_COLS


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def safe_ratio(numerator: pl.Expr, denominator: pl.Expr, scale: float = 100.0) -> pl.Expr:
    """numerator / denominator * scale, or 0 when the denominator is 0."""
    return (
        pl.when(denominator != 0)
        .then(numerator / denominator * scale)
        .otherwise(pl.lit(0.0))
    )


def median(values: Sequence[float]) -> float:
    """
    Median of a list of values.

    Even length averages the two middle elements; empty input returns 0.
    """
    if len(values) == 0:
        return 0.0
    return float(pl.Series(values, dtype=pl.Float64).median())


# =============================================================================
# PER-ROW COLUMNS
# =============================================================================

def with_savings(df: pl.DataFrame, rate_col: str = "rate_amount") -> pl.DataFrame:
    """
    Add savings columns for each (shipment, quote) row.

    Adds:
        - dollar_savings: current_rate - rate
        - percent_savings: dollar_savings / current_rate * 100 (0 if current_rate <= 0)
        - is_win: dollar_savings > 0 (a tie is not a win)
    """
    dollar = pl.col("current_rate") - pl.col(rate_col)
    return df.with_columns([
        dollar.alias("dollar_savings"),
        pl.when(pl.col("current_rate") > 0)
        .then(dollar / pl.col("current_rate") * 100)
        .otherwise(pl.lit(0.0))
        .alias("percent_savings"),
        (dollar > 0).alias("is_win"),
    ])


# =============================================================================
# AGGREGATIONS
# =============================================================================

def aggregate_stats(
    df: pl.DataFrame,
    by: list[str],
    rate_col: str = "rate_amount",
) -> pl.DataFrame:
    """
    Aggregate savings statistics per group, groups in first-seen order.

    Args:
        df: Best-rate rows (one per account x shipment)
        by: Grouping columns
        rate_col: Column holding the rate paid under the account

    Returns:
        DataFrame with `by` columns followed by STAT_COLS
    """
    df = with_savings(df, rate_col)

    stats = df.group_by(by, maintain_order=True).agg([
        pl.col(rate_col).sum().alias("total_spend"),
        pl.len().cast(pl.Int64).alias("shipments_quoted"),
        pl.col("is_win").sum().cast(pl.Int64).alias("wins"),
        pl.col("dollar_savings").mean().alias("avg_dollar_savings"),
        pl.col("percent_savings").mean().alias("avg_percent_savings"),
        pl.col("dollar_savings").median().alias("median_dollar_savings"),
        pl.col("percent_savings").median().alias("median_percent_savings"),
        pl.col("dollar_savings").sum().alias("total_savings"),
        pl.col("current_rate").sum().alias("current_cost"),
    ])

    stats = stats.with_columns([
        safe_ratio(pl.col("wins"), pl.col("shipments_quoted")).alias("win_rate"),
        safe_ratio(pl.col("total_spend"), pl.col("shipments_quoted"), scale=1.0).alias("average_rate"),
        # Implied original cost = spend + savings
        safe_ratio(
            pl.col("total_savings"),
            pl.col("total_spend") + pl.col("total_savings"),
        ).alias("total_savings_percent"),
    ])

    return stats.select(by + STAT_COLS)
