"""
Account Rankings

Competing definitions of the "best" account across all shipments.
MinCost is the default top-performer rule.
"""

from .base import Ranking


class MinCost(Ranking):
    """Lowest summed best-rate cost over the shipments the account quoted."""

    name = "MIN_COST"
    column = "total_spend"
    descending = False


class MaxWinRate(Ranking):
    """Highest share of quoted shipments beaten on current cost."""

    name = "MAX_WIN_RATE"
    column = "win_rate"
    descending = True


class MaxSavings(Ranking):
    """Highest total dollar savings against current cost."""

    name = "MAX_SAVINGS"
    column = "total_savings"
    descending = True
