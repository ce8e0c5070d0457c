"""
Ranking Base Class

Shared base class for account and service ranking strategies.
"""

from abc import ABC

import polars as pl


class Ranking(ABC):
    """
    Base class for all rankings.

    Attributes:
        name        - Short code (e.g., "MIN_COST", "WIN_RATE")
        column      - Statistic column the ranking orders by
        descending  - True if larger values rank first

    Sorting is stable: rows with equal values keep their input order, so the
    first-seen row wins every tie.
    """

    name: str
    column: str
    descending: bool = False

    @classmethod
    def sort(cls, df: pl.DataFrame) -> pl.DataFrame:
        """Order rows best-first."""
        return df.sort(cls.column, descending=cls.descending, maintain_order=True)

    @classmethod
    def best(cls, df: pl.DataFrame) -> dict | None:
        """Best row as a dict, or None for an empty frame."""
        if df.is_empty():
            return None
        return cls.sort(df).row(0, named=True)
