"""
Reference Settings

Static defaults used across the optimizer. Scripts may override them per run.
"""

from .defaults import (
    DEFAULT_ACCOUNT_RANKING,
    DEFAULT_SERVICE_RANKING,
    BEST_SERVICES_LIMIT,
    UNKNOWN_SERVICE,
    SAVINGS_TOLERANCE,
)
