"""
Service Rankings

Orderings for the accounts competing within one service type.
"""

from .base import Ranking


class WinRate(Ranking):
    name = "WIN_RATE"
    column = "win_rate"
    descending = True


class AverageRate(Ranking):
    name = "AVERAGE_RATE"
    column = "average_rate"
    descending = False


class ShipmentCount(Ranking):
    name = "SHIPMENT_COUNT"
    column = "shipments_quoted"
    descending = True
