"""
Unit Tests for Markup
"""

import polars as pl
import pytest

from rate_optimizer.markup import (
    MARKUP_PER_SERVICE,
    MarkupConfig,
    apply_markup,
    markup_totals,
)


@pytest.fixture
def rates():
    return pl.DataFrame({
        "service_type": ["Ground", "Express", "Ground"],
        "current_rate": [100.0, 70.0, 50.0],
        "rate_amount": [80.0, 65.0, 40.0],
    })


class TestApplyMarkup:
    """Tests for apply_markup()."""

    def test_global(self, rates):
        result = apply_markup(rates, MarkupConfig(global_percentage=10.0))

        assert result["markup_percentage"].to_list() == [10.0, 10.0, 10.0]
        assert result["markup_amount"].to_list() == [
            pytest.approx(8.0), pytest.approx(6.5), pytest.approx(4.0)
        ]
        assert result["final_rate"].to_list() == [
            pytest.approx(88.0), pytest.approx(71.5), pytest.approx(44.0)
        ]

    def test_per_service(self, rates):
        config = MarkupConfig(kind=MARKUP_PER_SERVICE, service_markups={"Express": 20.0})
        result = apply_markup(rates, config)

        assert result["markup_percentage"].to_list() == [0.0, 20.0, 0.0]
        assert result["final_rate"].to_list() == [
            pytest.approx(80.0), pytest.approx(78.0), pytest.approx(40.0)
        ]

    def test_per_service_without_entries(self, rates):
        result = apply_markup(rates, MarkupConfig(kind=MARKUP_PER_SERVICE))
        assert result["final_rate"].to_list() == rates["rate_amount"].to_list()

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError, match="Unknown markup kind"):
            MarkupConfig(kind="tiered")


class TestMarkupTotals:
    """Tests for markup_totals()."""

    def test_totals(self, rates):
        totals = markup_totals(apply_markup(rates, MarkupConfig(global_percentage=10.0)))

        assert totals["total_current_cost"] == pytest.approx(220.0)
        assert totals["total_base_rate"] == pytest.approx(185.0)
        assert totals["total_markup_amount"] == pytest.approx(18.5)
        assert totals["total_final_rate"] == pytest.approx(203.5)
        assert totals["total_savings"] == pytest.approx(16.5)
        assert totals["savings_percentage"] == pytest.approx(16.5 / 220.0 * 100)
        assert totals["margin_percentage"] == pytest.approx(18.5 / 203.5 * 100)

    def test_empty(self, rates):
        totals = markup_totals(apply_markup(rates.clear(), MarkupConfig(global_percentage=10.0)))
        assert all(v == 0.0 for v in totals.values())
