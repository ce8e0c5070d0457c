"""
KPI Summary

Top-level scorecard numbers derived from the account statistics.

top_performer follows the ranking (MinCost by default: lowest summed best-rate
cost over the shipments the account quoted, ties to the account seen first).
total_savings is the top performer's total savings; current_cost covers the
whole shipment population.
"""

from dataclasses import dataclass

import polars as pl

from .models import AccountId
from .ranking import MinCost, Ranking


@dataclass(frozen=True)
class KPISummary:
    top_performer: AccountId | None = None
    total_savings: float = 0.0
    current_cost: float = 0.0
    savings_percentage: float = 0.0
    accounts_compared: int = 0
    shipment_count: int = 0


def summarize_kpis(
    account_stats: pl.DataFrame,
    shipments: pl.DataFrame,
    ranking: type[Ranking] = MinCost,
) -> KPISummary:
    """
    Build the scorecard.

    Args:
        account_stats: Output of aggregate_accounts()
        shipments: Normalized shipment frame
        ranking: Rule picking the top performer

    Returns:
        KPISummary (all zeros for empty input)
    """
    current_cost = float(shipments["current_rate"].sum()) if shipments.height else 0.0
    top = ranking.best(account_stats)

    if top is None:
        return KPISummary(current_cost=current_cost, shipment_count=shipments.height)

    total_savings = float(top["total_savings"])
    return KPISummary(
        top_performer=AccountId(top["account_name"]),
        total_savings=total_savings,
        current_cost=current_cost,
        savings_percentage=total_savings / current_cost * 100 if current_cost != 0 else 0.0,
        accounts_compared=account_stats["account_name"].n_unique(),
        shipment_count=shipments.height,
    )
