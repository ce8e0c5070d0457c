"""
Rate Optimizer

Compares carrier account quotes per shipment and service, aggregates
win-rate and savings statistics, and projects savings for an account
assignment chosen at global, service or shipment scope.
"""

from .pipeline import analyze, AnalysisResult
from .assignment import AssignmentSelector, AssignmentState, ProjectedMetrics
from .kpi import KPISummary
from .markup import MarkupConfig
from .matching import MatchReport
from .models import AccountId, RateQuote, ShipmentRecord
from .version import VERSION

__all__ = [
    "analyze",
    "AnalysisResult",
    "AssignmentSelector",
    "AssignmentState",
    "ProjectedMetrics",
    "KPISummary",
    "MarkupConfig",
    "MatchReport",
    "AccountId",
    "RateQuote",
    "ShipmentRecord",
    "VERSION",
]
