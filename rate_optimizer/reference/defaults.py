"""
Optimizer Defaults

Ranking names refer to strategies in rate_optimizer.ranking.
"""

# Top performer = lowest summed best-rate cost over the shipments an account quoted
DEFAULT_ACCOUNT_RANKING = "MIN_COST"

# Per-service account ranking (win rate descending)
DEFAULT_SERVICE_RANKING = "WIN_RATE"

# Number of services listed per account in best_services()
BEST_SERVICES_LIMIT = 3

# Label for shipments that arrive without a service type
UNKNOWN_SERVICE = "Unknown"

# Absolute tolerance when reconciling currency sums
SAVINGS_TOLERANCE = 1e-6
