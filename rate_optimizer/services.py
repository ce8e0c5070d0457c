"""
Service Aggregation

Same statistics as the account aggregation, partitioned by the shipment's
service_type: one row per (service_type, account_name).

Services appear in first-seen order. Within a service, accounts are ranked
by the chosen ranking (win rate descending by default).
"""

import polars as pl

from .models import AccountId
from .ranking import Ranking, WinRate
from .stats import aggregate_stats


def aggregate_services(
    best_rates: pl.DataFrame,
    ranking: type[Ranking] = WinRate,
) -> pl.DataFrame:
    """
    Aggregate savings statistics per (service_type, account_name).

    Args:
        best_rates: Output of reduce_best_rates()
        ranking: Account order within each service

    Returns:
        DataFrame with SERVICE_STAT_COLS
    """
    stats = aggregate_stats(best_rates, ["service_type", "account_name"])
    return rank_within_services(stats, ranking)


def rank_within_services(
    service_stats: pl.DataFrame,
    ranking: type[Ranking] = WinRate,
) -> pl.DataFrame:
    """Re-rank accounts inside every service, keeping service order."""
    frames = [
        ranking.sort(service_stats.filter(pl.col("service_type") == service))
        for service in service_types(service_stats)
    ]
    if not frames:
        return service_stats
    return pl.concat(frames)


def rank_service_accounts(
    service_stats: pl.DataFrame,
    service_type: str,
    ranking: type[Ranking] = WinRate,
) -> pl.DataFrame:
    """Ranked account rows for one service (empty if the service is unknown)."""
    return ranking.sort(service_stats.filter(pl.col("service_type") == service_type))


def service_types(service_stats: pl.DataFrame) -> list[str]:
    """Service types in first-seen order."""
    return service_stats["service_type"].unique(maintain_order=True).to_list()


def service_accounts(service_stats: pl.DataFrame) -> dict[str, list[AccountId]]:
    """Accounts holding at least one quote per service, in ranked order."""
    accounts: dict[str, list[AccountId]] = {}
    for row in service_stats.select(["service_type", "account_name"]).iter_rows(named=True):
        accounts.setdefault(row["service_type"], []).append(AccountId(row["account_name"]))
    return accounts


def summarize_services(
    service_stats: pl.DataFrame,
    best_rates: pl.DataFrame,
    ranking: type[Ranking] = WinRate,
) -> pl.DataFrame:
    """
    One row per service.

    Returns:
        DataFrame with columns:
            - service_type
            - accounts_quoted: accounts with at least one quote
            - best_account / worst_account: first / last under the ranking
            - rate_spread: max minus min average_rate across accounts
            - shipment_count: shipments with at least one quote
            - current_cost: current cost of those shipments
    """
    ranked = rank_within_services(service_stats, ranking)

    accounts = (
        ranked
        .group_by("service_type", maintain_order=True)
        .agg([
            pl.len().cast(pl.Int64).alias("accounts_quoted"),
            pl.col("account_name").first().alias("best_account"),
            pl.col("account_name").last().alias("worst_account"),
            (pl.col("average_rate").max() - pl.col("average_rate").min()).alias("rate_spread"),
        ])
        .with_row_index("_order")
    )

    shipments = (
        best_rates
        .unique(subset="shipment_key", keep="first", maintain_order=True)
        .group_by("service_type", maintain_order=True)
        .agg([
            pl.len().cast(pl.Int64).alias("shipment_count"),
            pl.col("current_rate").sum().alias("current_cost"),
        ])
    )

    return (
        accounts
        .join(shipments, on="service_type", how="left")
        .with_columns([
            pl.col("shipment_count").fill_null(0),
            pl.col("current_cost").fill_null(0.0),
        ])
        .sort("_order")
        .drop("_order")
    )
