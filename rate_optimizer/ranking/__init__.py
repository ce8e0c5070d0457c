"""
Rankings Package

Exports all ranking classes and lookup helpers.

Usage:
    from rate_optimizer.ranking import MinCost, WinRate, get_ranking
"""

from .base import Ranking
from .account import MinCost, MaxWinRate, MaxSavings
from .service import WinRate, AverageRate, ShipmentCount


ACCOUNT_RANKINGS: list[type[Ranking]] = [MinCost, MaxWinRate, MaxSavings]

SERVICE_RANKINGS: list[type[Ranking]] = [WinRate, AverageRate, ShipmentCount]

ALL: list[type[Ranking]] = ACCOUNT_RANKINGS + SERVICE_RANKINGS


def get_ranking(name: str) -> type[Ranking]:
    """
    Look up a ranking by its short code (case-insensitive).

    Raises:
        ValueError: If no ranking has that name
    """
    for ranking in ALL:
        if ranking.name == name.upper():
            return ranking
    valid = ", ".join(r.name for r in ALL)
    raise ValueError(f"Unknown ranking '{name}'. Expected one of: {valid}")


__all__ = [
    "Ranking",
    "MinCost",
    "MaxWinRate",
    "MaxSavings",
    "WinRate",
    "AverageRate",
    "ShipmentCount",
    "ACCOUNT_RANKINGS",
    "SERVICE_RANKINGS",
    "ALL",
    "get_ranking",
]
