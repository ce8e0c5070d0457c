"""
Account Aggregation

Per-account summary statistics across every shipment the account quoted.

OUTPUT ORDER
------------
    1. Top performer (per the ranking, MinCost by default)
    2. Remaining accounts by total_spend descending

Ties keep first-seen order, so repeated runs on the same input return
identical frames.
"""

import polars as pl

from .comparison import compare_shipments
from .models import AccountId
from .ranking import MinCost, Ranking
from .reference import BEST_SERVICES_LIMIT
from .stats import aggregate_stats


def aggregate_accounts(
    best_rates: pl.DataFrame,
    ranking: type[Ranking] = MinCost,
) -> pl.DataFrame:
    """
    Aggregate savings statistics per account.

    Args:
        best_rates: Output of reduce_best_rates()
        ranking: Rule picking the top performer

    Returns:
        DataFrame with ACCOUNT_STAT_COLS, one row per account. wins counts
        shipments beaten on current cost; best_rate_wins counts shipments
        where the account holds the cheapest quote of all accounts.
    """
    stats = aggregate_stats(best_rates, ["account_name"])

    cheapest = (
        compare_shipments(best_rates)
        .group_by("best_account")
        .agg(pl.len().cast(pl.Int64).alias("best_rate_wins"))
        .rename({"best_account": "account_name"})
    )
    stats = (
        stats
        .with_row_index("_order")
        .join(cheapest, on="account_name", how="left")
        .with_columns(pl.col("best_rate_wins").fill_null(0))
        .sort("_order")
        .drop("_order")
    )

    return order_accounts(stats, ranking)


def order_accounts(
    stats: pl.DataFrame,
    ranking: type[Ranking] = MinCost,
) -> pl.DataFrame:
    """Put the top performer first, then the rest by total_spend descending."""
    top = ranking.best(stats)
    if top is None:
        return stats

    is_top = pl.col("account_name") == top["account_name"]
    rest = stats.filter(~is_top).sort("total_spend", descending=True, maintain_order=True)
    return pl.concat([stats.filter(is_top), rest])


def best_services(
    best_rates: pl.DataFrame,
    limit: int = BEST_SERVICES_LIMIT,
) -> dict[AccountId, list[str]]:
    """
    Services in which each account most often has the cheapest quote.

    Returns:
        account -> up to `limit` service names, most wins first. Accounts that
        never have the cheapest quote map to an empty list.
    """
    winners = compare_shipments(best_rates)
    counts = (
        winners
        .group_by(["best_account", "best_service"], maintain_order=True)
        .agg(pl.len().alias("wins"))
        .sort("wins", descending=True, maintain_order=True)
    )

    result: dict[AccountId, list[str]] = {
        AccountId(a): [] for a in best_rates["account_name"].unique(maintain_order=True).to_list()
    }
    for row in counts.iter_rows(named=True):
        services = result.setdefault(AccountId(row["best_account"]), [])
        if len(services) < limit and row["best_service"] is not None:
            services.append(row["best_service"])

    return result
