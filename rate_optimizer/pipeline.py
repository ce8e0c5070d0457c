"""
Rate Optimization Pipeline

Shipments and quotes in, aggregated frames out. Shipments and quotes can come
from any source (upload, database, manual creation) as long as they carry the
required columns.

REQUIRED INPUT COLUMNS
----------------------
    shipments:
        shipment_id     - Stable shipment key
        current_rate    - Cost currently paid
        service_type    - Carrier-agnostic service label
        (optional: tracking_id, weight, shipment_index, account_used)

    quotes:
        account_name    - Carrier account
        rate_amount     - Quoted price (>= 0)
        (optional: shipment_index, carrier_type, service_code, service_name,
         is_negotiated, quoted_tracking_id, quoted_shipment_id)

STAGES
------
    match_quotes()        - quote -> shipment (tracking id, id, position)
    reduce_best_rates()   - cheapest quote per (account, shipment)
    aggregate_accounts()  - per-account statistics
    aggregate_services()  - per-(service, account) statistics
    summarize_kpis()      - scorecard

USAGE
-----
    from rate_optimizer import analyze
    result = analyze(shipments, quotes)
    selector = result.selector()
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import polars as pl

from .accounts import aggregate_accounts
from .assignment import AssignmentSelector
from .best_rates import reduce_best_rates
from .comparison import compare_shipments
from .kpi import KPISummary, summarize_kpis
from .markup import MarkupConfig
from .matching import MatchReport, match_quotes
from .models import RateQuote, ShipmentRecord, shipments_frame
from .ranking import MinCost, Ranking, WinRate
from .services import aggregate_services, summarize_services


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    shipments: pl.DataFrame
    best_rates: pl.DataFrame
    account_stats: pl.DataFrame
    service_stats: pl.DataFrame
    service_summary: pl.DataFrame
    shipment_comparison: pl.DataFrame
    kpis: KPISummary
    match_report: MatchReport

    def selector(
        self,
        markup: MarkupConfig | None = None,
        ranking: type[Ranking] = WinRate,
    ) -> AssignmentSelector:
        """New assignment selector over this analysis."""
        return AssignmentSelector(
            self.shipments,
            self.best_rates,
            service_stats=self.service_stats,
            markup=markup,
            ranking=ranking,
        )


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def analyze(
    shipments: pl.DataFrame | Sequence[ShipmentRecord],
    quotes: pl.DataFrame | Sequence[RateQuote],
    account_ranking: type[Ranking] = MinCost,
    service_ranking: type[Ranking] = WinRate,
) -> AnalysisResult:
    """
    Run the full analysis.

    Args:
        shipments: Shipment frame or records
        quotes: Quote frame or records
        account_ranking: Top-performer rule (accounts and KPIs)
        service_ranking: Account order within each service

    Returns:
        AnalysisResult. Unmatched or invalid quotes are excluded and counted in
        match_report; empty input yields empty frames and zeroed KPIs.
    """
    shipments = shipments_frame(shipments)

    matched, report = match_quotes(quotes, shipments)
    best_rates = reduce_best_rates(matched)

    account_stats = aggregate_accounts(best_rates, account_ranking)
    service_stats = aggregate_services(best_rates, service_ranking)
    kpis = summarize_kpis(account_stats, shipments, account_ranking)

    logger.info(
        "Analyzed %d shipment(s), %d quote(s) matched of %d, %d account(s)",
        shipments.height, report.matched_quotes, report.total_quotes, kpis.accounts_compared,
    )

    return AnalysisResult(
        shipments=shipments,
        best_rates=best_rates,
        account_stats=account_stats,
        service_stats=service_stats,
        service_summary=summarize_services(service_stats, best_rates, service_ranking),
        shipment_comparison=compare_shipments(best_rates),
        kpis=kpis,
        match_report=report,
    )
