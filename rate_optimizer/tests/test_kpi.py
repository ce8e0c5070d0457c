"""
Unit Tests for KPI Summary
"""

import polars as pl
import pytest

from rate_optimizer.accounts import aggregate_accounts
from rate_optimizer.kpi import KPISummary, summarize_kpis
from rate_optimizer.models import shipments_frame
from rate_optimizer.ranking import MaxWinRate


class TestSummarizeKpis:
    """Tests for summarize_kpis()."""

    def test_scenario(self, shipments, best_rates):
        kpis = summarize_kpis(aggregate_accounts(best_rates), shipments_frame(shipments))

        assert kpis.top_performer == "B"
        assert kpis.total_savings == pytest.approx(20.0)
        assert kpis.current_cost == pytest.approx(220.0)
        assert kpis.savings_percentage == pytest.approx(20.0 / 220.0 * 100)
        assert kpis.accounts_compared == 2
        assert kpis.shipment_count == 3

    def test_ranking_changes_top_performer(self, shipments):
        stats = pl.DataFrame({
            "account_name": ["A", "B"],
            "total_spend": [10.0, 50.0],
            "win_rate": [20.0, 90.0],
            "total_savings": [1.0, 2.0],
        })
        kpis = summarize_kpis(stats, shipments_frame(shipments), MaxWinRate)
        assert kpis.top_performer == "B"
        assert kpis.total_savings == pytest.approx(2.0)

    def test_empty_input(self, empty_best_rates):
        kpis = summarize_kpis(aggregate_accounts(empty_best_rates), shipments_frame([]))
        assert kpis == KPISummary()

    def test_zero_current_cost(self):
        shipments = pl.DataFrame({"shipment_id": ["1"], "current_rate": [0.0], "service_type": ["Ground"]})
        stats = pl.DataFrame({
            "account_name": ["A"],
            "total_spend": [5.0],
            "total_savings": [-5.0],
        })
        kpis = summarize_kpis(stats, shipments_frame(shipments))
        assert kpis.savings_percentage == 0.0
        assert kpis.top_performer == "A"
