"""
Account Rate Comparison Report
==============================

Runs the rate optimization over normalized shipment and quote files (CSV or
parquet, columns as in rate_optimizer.columns) and prints a summary.

Usage:
    python -m rate_optimizer.scripts.run_analysis --shipments shipments.csv --quotes quotes.csv
    python -m rate_optimizer.scripts.run_analysis --shipments s.parquet --quotes q.parquet --ranking MAX_WIN_RATE
    python -m rate_optimizer.scripts.run_analysis --shipments s.csv --quotes q.csv --assign "UPS Main" --markup 10
    python -m rate_optimizer.scripts.run_analysis --shipments s.csv --quotes q.csv --output-dir output/
"""

import argparse
import logging
from pathlib import Path

import polars as pl

from rate_optimizer.assignment import AssignmentSelector
from rate_optimizer.markup import MarkupConfig
from rate_optimizer.models import AccountId
from rate_optimizer.pipeline import AnalysisResult, analyze
from rate_optimizer.ranking import get_ranking
from rate_optimizer.reference import DEFAULT_ACCOUNT_RANKING, DEFAULT_SERVICE_RANKING
from rate_optimizer.services import rank_service_accounts
from rate_optimizer.version import VERSION


# Identifier columns read as strings (tracking numbers keep leading zeros)
STRING_COLS = [
    "shipment_id",
    "tracking_id",
    "account_used",
    "quoted_tracking_id",
    "quoted_shipment_id",
    "service_type",
]


# =============================================================================
# DATA LOADING
# =============================================================================

def load_frame(path: Path) -> pl.DataFrame:
    """Load a CSV or parquet file."""
    if path.suffix.lower() == ".parquet":
        return pl.read_parquet(path)

    header = pl.read_csv(path, n_rows=0).columns
    overrides = {c: pl.Utf8 for c in STRING_COLS if c in header}
    return pl.read_csv(path, schema_overrides=overrides)


# =============================================================================
# REPORT
# =============================================================================

def print_results(result: AnalysisResult, selector: AssignmentSelector) -> None:
    """Print the analysis summary."""
    report = result.match_report
    kpis = result.kpis

    print("\n" + "=" * 60)
    print("QUOTE MATCHING")
    print("=" * 60)
    print(f"Quotes:              {report.total_quotes:>8,}")
    print(f"  matched            {report.matched_quotes:>8,} ({report.match_rate:.1f}%)")
    print(f"    by tracking id   {report.matched_by_tracking_id:>8,}")
    print(f"    by id            {report.matched_by_id:>8,}")
    print(f"    by position      {report.matched_by_index:>8,}")
    print(f"  unmatched          {report.unmatched_quotes:>8,}")
    print(f"  rejected           {report.rejected_quotes:>8,}")

    print("\n" + "=" * 60)
    print("SCORECARD")
    print("=" * 60)
    print(f"Shipments:           {kpis.shipment_count:>8,}")
    print(f"Accounts compared:   {kpis.accounts_compared:>8,}")
    print(f"Top performer:       {kpis.top_performer or '-'}")
    print(f"Current cost:        ${kpis.current_cost:>12,.2f}")
    print(f"Total savings:       ${kpis.total_savings:>12,.2f} ({kpis.savings_percentage:.1f}%)")

    print("\n" + "=" * 60)
    print("ACCOUNTS")
    print("=" * 60)
    print(f"{'Account':<24} {'Spend':>12} {'Quoted':>7} {'Win %':>7} {'Cheapest':>9} {'Savings':>12}")
    for row in result.account_stats.iter_rows(named=True):
        print(
            f"{row['account_name']:<24} ${row['total_spend']:>11,.2f} "
            f"{row['shipments_quoted']:>7,} {row['win_rate']:>6.1f}% "
            f"{row['best_rate_wins']:>9,} "
            f"${row['total_savings']:>11,.2f}"
        )

    print("\n" + "=" * 60)
    print("SERVICES")
    print("=" * 60)
    for row in result.service_summary.iter_rows(named=True):
        service = row["service_type"]
        selected = selector.state.service.get(service, "-")
        print(
            f"\n{service}: {row['shipment_count']:,} shipments, "
            f"{row['accounts_quoted']} account(s), selected: {selected}"
        )
        ranked = rank_service_accounts(result.service_stats, service)
        for account in ranked.iter_rows(named=True):
            print(
                f"  {account['account_name']:<22} win {account['win_rate']:>5.1f}%  "
                f"avg ${account['average_rate']:>8,.2f}  n={account['shipments_quoted']:,}"
            )

    metrics = selector.metrics
    print("\n" + "=" * 60)
    print("PROJECTED (CURRENT SELECTION)")
    print("=" * 60)
    print(f"Optimized shipments: {metrics.optimized_shipment_count:>8,} of {metrics.total_shipments:,}")
    print(f"Without quote:       {metrics.unquoted_shipment_count:>8,}")
    print(f"Projected savings:   ${metrics.total_optimized_savings:>12,.2f} ({metrics.savings_percent:.1f}%)")


def write_outputs(result: AnalysisResult, selector: AssignmentSelector, output_dir: Path) -> None:
    """Write the result frames as CSV."""
    output_dir.mkdir(parents=True, exist_ok=True)
    result.account_stats.write_csv(output_dir / "account_stats.csv")
    result.service_stats.write_csv(output_dir / "service_stats.csv")
    result.service_summary.write_csv(output_dir / "service_summary.csv")
    result.shipment_comparison.write_csv(output_dir / "shipment_comparison.csv")
    selector.apply_assignments().write_csv(output_dir / "shipments_assigned.csv")
    print(f"\nOutputs written to: {output_dir}")


# =============================================================================
# MAIN
# =============================================================================

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compare carrier account quotes per shipment")
    parser.add_argument("--shipments", type=Path, required=True, help="Shipment file (CSV or parquet)")
    parser.add_argument("--quotes", type=Path, required=True, help="Quote file (CSV or parquet)")
    parser.add_argument("--ranking", default=DEFAULT_ACCOUNT_RANKING,
                        help="Top-performer rule: MIN_COST, MAX_WIN_RATE, MAX_SAVINGS")
    parser.add_argument("--service-ranking", default=DEFAULT_SERVICE_RANKING,
                        help="Account order per service: WIN_RATE, AVERAGE_RATE, SHIPMENT_COUNT")
    parser.add_argument("--assign", default=None,
                        help="Select this account for every service it quoted")
    parser.add_argument("--markup", type=float, default=None,
                        help="Global markup percentage applied to quoted rates")
    parser.add_argument("--output-dir", type=Path, default=None, help="Write result CSVs here")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> AnalysisResult:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    for path in (args.shipments, args.quotes):
        if not path.exists():
            raise SystemExit(f"Input file not found: {path}")

    try:
        account_ranking = get_ranking(args.ranking)
        service_ranking = get_ranking(args.service_ranking)
    except ValueError as e:
        raise SystemExit(str(e))

    print(f"\n=== Account Rate Comparison (v{VERSION}) ===")
    print(f"Shipments: {args.shipments}")
    print(f"Quotes:    {args.quotes}")

    result = analyze(
        load_frame(args.shipments),
        load_frame(args.quotes),
        account_ranking=account_ranking,
        service_ranking=service_ranking,
    )

    markup = MarkupConfig(global_percentage=args.markup) if args.markup is not None else None
    selector = result.selector(markup=markup, ranking=service_ranking)

    if args.assign:
        updated = selector.select_account_for_all_services(AccountId(args.assign))
        if not updated:
            print(f"\nWarning: {args.assign} has no quotes in any service")

    print_results(result, selector)

    if args.output_dir:
        write_outputs(result, selector, args.output_dir)

    return result


if __name__ == "__main__":
    main()
