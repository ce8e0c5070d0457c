"""
Markup

Optional percentage markup on quoted rates, applied globally or per service
type. Savings projected under a markup compare the current cost against the
marked-up final rate.
"""

from dataclasses import dataclass, field

import polars as pl

from .stats import safe_ratio


MARKUP_GLOBAL = "global"
MARKUP_PER_SERVICE = "per-service"


@dataclass(frozen=True)
class MarkupConfig:
    """
    Markup settings.

    Attributes:
        kind                - MARKUP_GLOBAL or MARKUP_PER_SERVICE
        global_percentage   - Percent added to every rate (global kind)
        service_markups     - service_type -> percent (per-service kind);
                              services not listed get no markup
    """

    kind: str = MARKUP_GLOBAL
    global_percentage: float = 0.0
    service_markups: dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        if self.kind not in (MARKUP_GLOBAL, MARKUP_PER_SERVICE):
            raise ValueError(
                f"Unknown markup kind '{self.kind}'. "
                f"Expected '{MARKUP_GLOBAL}' or '{MARKUP_PER_SERVICE}'"
            )

    def percentage_expr(self, service_col: str = "service_type") -> pl.Expr:
        """Markup percentage for each row."""
        if self.kind == MARKUP_GLOBAL:
            return pl.lit(float(self.global_percentage))
        if not self.service_markups:
            return pl.lit(0.0)
        return pl.col(service_col).replace_strict(
            self.service_markups, default=0.0, return_dtype=pl.Float64
        )


def apply_markup(
    df: pl.DataFrame,
    config: MarkupConfig,
    rate_col: str = "rate_amount",
) -> pl.DataFrame:
    """
    Add markup columns to a rate frame.

    Adds:
        - markup_percentage
        - markup_amount: rate * markup_percentage / 100
        - final_rate: rate + markup_amount
    """
    df = df.with_columns(config.percentage_expr().cast(pl.Float64).alias("markup_percentage"))
    return df.with_columns(
        (pl.col(rate_col) * pl.col("markup_percentage") / 100).alias("markup_amount")
    ).with_columns(
        (pl.col(rate_col) + pl.col("markup_amount")).alias("final_rate")
    )


def markup_totals(df: pl.DataFrame, rate_col: str = "rate_amount") -> dict:
    """Portfolio totals for a frame produced by apply_markup()."""
    if len(df) == 0:
        return {
            "total_current_cost": 0.0,
            "total_base_rate": 0.0,
            "total_markup_amount": 0.0,
            "total_final_rate": 0.0,
            "total_savings": 0.0,
            "savings_percentage": 0.0,
            "margin_percentage": 0.0,
        }

    totals = df.select([
        pl.col("current_rate").sum().alias("total_current_cost"),
        pl.col(rate_col).sum().alias("total_base_rate"),
        pl.col("markup_amount").sum().alias("total_markup_amount"),
        pl.col("final_rate").sum().alias("total_final_rate"),
        (pl.col("current_rate") - pl.col("final_rate")).sum().alias("total_savings"),
    ]).with_columns([
        safe_ratio(pl.col("total_savings"), pl.col("total_current_cost")).alias("savings_percentage"),
        safe_ratio(pl.col("total_markup_amount"), pl.col("total_final_rate")).alias("margin_percentage"),
    ])

    return {k: float(v) for k, v in totals.row(0, named=True).items()}
