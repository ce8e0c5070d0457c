"""
Integration Tests for the Rate Optimization Pipeline

End-to-end runs of analyze() and the command-line report.
"""

import polars as pl
import pytest

from rate_optimizer import analyze
from rate_optimizer.columns import ACCOUNT_STAT_COLS, SERVICE_STAT_COLS
from rate_optimizer.kpi import KPISummary
from rate_optimizer.models import RateQuote
from rate_optimizer.ranking import MaxWinRate
from rate_optimizer.scripts import run_analysis


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def shipment_df():
    return pl.DataFrame({
        "shipment_id": ["1", "2", "3"],
        "tracking_id": ["T1", "T2", "T3"],
        "current_rate": [100.0, 50.0, 70.0],
        "weight": [5.0, 2.0, 3.5],
        "service_type": ["Ground", "Ground", "Express"],
    })


@pytest.fixture
def quote_df():
    return pl.DataFrame({
        "account_name": ["A", "B", "A", "B", "A"],
        "rate_amount": [80.0, 90.0, 60.0, 40.0, 65.0],
        "quoted_tracking_id": ["T1", "T1", "T2", "T2", "T3"],
        "service_name": ["UPS Ground", "FedEx Ground", "UPS Ground", "FedEx Ground", "UPS 2nd Day Air"],
    })


# =============================================================================
# ANALYZE
# =============================================================================

class TestAnalyze:
    """End-to-end tests for analyze()."""

    def test_scenario_from_records(self, shipments, quotes):
        result = analyze(shipments, quotes)
        stats = {r["account_name"]: r for r in result.account_stats.to_dicts()}

        assert stats["A"]["total_spend"] == pytest.approx(205.0)
        assert stats["A"]["wins"] == 2
        assert stats["B"]["total_spend"] == pytest.approx(130.0)
        assert stats["B"]["wins"] == 2
        assert stats["B"]["shipments_quoted"] == 2
        assert stats["A"]["best_rate_wins"] == 2
        assert stats["B"]["best_rate_wins"] == 1

        assert result.kpis.top_performer == "B"
        assert result.account_stats["account_name"].to_list() == ["B", "A"]
        assert result.match_report.matched_quotes == 5

    def test_frames_and_records_agree(self, shipments, quotes, shipment_df, quote_df):
        from_records = analyze(shipments, quotes)
        from_frames = analyze(shipment_df, quote_df)

        assert from_frames.account_stats.equals(from_records.account_stats)
        assert from_frames.kpis == from_records.kpis

    def test_output_shapes(self, shipments, quotes):
        result = analyze(shipments, quotes)

        assert result.account_stats.columns == ACCOUNT_STAT_COLS
        assert result.service_stats.columns == SERVICE_STAT_COLS
        assert result.service_summary.height == 2
        assert result.shipment_comparison.height == 3

    def test_account_ranking_option(self, shipments, quotes):
        result = analyze(shipments, quotes, account_ranking=MaxWinRate)
        assert result.kpis.top_performer == "B"
        assert result.account_stats["account_name"].to_list() == ["B", "A"]

    def test_unmatched_quotes_excluded(self, shipments, quotes):
        extra = quotes + [RateQuote(account_name="C", rate_amount=1.0, quoted_tracking_id="NOPE")]
        result = analyze(shipments, extra)

        assert result.match_report.unmatched_quotes == 1
        assert result.match_report.unmatched_quote_indices == (5,)
        assert "C" not in result.account_stats["account_name"].to_list()

    def test_deterministic(self, shipments, quotes):
        first = analyze(shipments, quotes)
        second = analyze(shipments, quotes)

        assert first.account_stats.equals(second.account_stats)
        assert first.service_stats.equals(second.service_stats)
        assert first.kpis == second.kpis

    def test_empty_input(self):
        result = analyze([], [])

        assert result.account_stats.height == 0
        assert result.service_stats.height == 0
        assert result.service_summary.height == 0
        assert result.kpis == KPISummary()
        assert result.match_report.match_rate == 0.0

    def test_shipments_without_quotes(self, shipments):
        result = analyze(shipments, [])
        assert result.kpis.top_performer is None
        assert result.kpis.current_cost == pytest.approx(220.0)
        assert result.kpis.shipment_count == 3

    def test_selector(self, shipments, quotes):
        selector = analyze(shipments, quotes).selector()
        assert selector.select_account_for_all_services("A") == ["Ground", "Express"]
        assert selector.metrics.total_optimized_savings == pytest.approx(15.0)


# =============================================================================
# COMMAND LINE
# =============================================================================

class TestRunAnalysis:
    """Tests for the run_analysis script."""

    @pytest.fixture
    def input_files(self, tmp_path, shipment_df, quote_df):
        shipments_path = tmp_path / "shipments.csv"
        quotes_path = tmp_path / "quotes.csv"
        shipment_df.write_csv(shipments_path)
        quote_df.write_csv(quotes_path)
        return shipments_path, quotes_path

    def test_report(self, input_files, capsys):
        shipments_path, quotes_path = input_files
        result = run_analysis.main(["--shipments", str(shipments_path), "--quotes", str(quotes_path)])

        out = capsys.readouterr().out
        assert "SCORECARD" in out
        assert "Top performer:       B" in out
        assert result.kpis.top_performer == "B"

    def test_identifiers_read_as_strings(self, tmp_path):
        path = tmp_path / "shipments.csv"
        pl.DataFrame({
            "shipment_id": ["007"],
            "current_rate": [1.0],
            "service_type": ["Ground"],
        }).write_csv(path)
        assert run_analysis.load_frame(path)["shipment_id"].to_list() == ["007"]

    def test_writes_outputs(self, input_files, tmp_path):
        shipments_path, quotes_path = input_files
        output_dir = tmp_path / "out"
        run_analysis.main([
            "--shipments", str(shipments_path),
            "--quotes", str(quotes_path),
            "--assign", "A",
            "--output-dir", str(output_dir),
        ])

        assigned = pl.read_csv(output_dir / "shipments_assigned.csv")
        assert assigned["account_used"].to_list() == ["A", "A", "A"]
        assert (output_dir / "account_stats.csv").exists()

    def test_missing_file(self, tmp_path):
        with pytest.raises(SystemExit):
            run_analysis.main(["--shipments", str(tmp_path / "x.csv"), "--quotes", str(tmp_path / "y.csv")])

    def test_unknown_ranking(self, input_files):
        shipments_path, quotes_path = input_files
        with pytest.raises(SystemExit):
            run_analysis.main([
                "--shipments", str(shipments_path),
                "--quotes", str(quotes_path),
                "--ranking", "CHEAPEST",
            ])
