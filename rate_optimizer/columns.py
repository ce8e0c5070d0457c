"""
Column Schema Definitions

Typed input schemas for shipments and quotes, the derived key columns, and
the column order of every statistics frame.
"""

import polars as pl


# =============================================================================
# SHIPMENT COLUMNS (one row per physical shipment)
# =============================================================================

SHIPMENT_SCHEMA = {
    "shipment_id": pl.Utf8,         # Stable key (numeric ids are stored as strings)
    "tracking_id": pl.Utf8,         # Carrier tracking number (optional)
    "current_rate": pl.Float64,     # Cost currently paid
    "weight": pl.Float64,           # Package weight
    "service_type": pl.Utf8,        # Carrier-agnostic service label
    "shipment_index": pl.Int64,     # Position in the original upload
    "account_used": pl.Utf8,        # Persisted account assignment (optional)
}

REQUIRED_SHIPMENT_COLS = [
    "shipment_id",
    "current_rate",
    "service_type",
]


# =============================================================================
# QUOTE COLUMNS (one row per shipment x account x service quote)
# =============================================================================

QUOTE_SCHEMA = {
    "shipment_index": pl.Int64,     # Positional join key (last resort)
    "account_name": pl.Utf8,        # Carrier account, the unit of comparison
    "carrier_type": pl.Utf8,        # e.g. "UPS", "FEDEX"
    "service_code": pl.Utf8,        # Carrier service code
    "service_name": pl.Utf8,        # Carrier service name
    "rate_amount": pl.Float64,      # Quoted price
    "is_negotiated": pl.Boolean,    # Negotiated vs published rate
    "quoted_tracking_id": pl.Utf8,  # Tracking id echoed by the quoting service
    "quoted_shipment_id": pl.Utf8,  # Shipment id echoed by the quoting service
}

REQUIRED_QUOTE_COLS = [
    "account_name",
    "rate_amount",
]


# =============================================================================
# DERIVED COLUMNS
# =============================================================================

KEY_COLS = [
    "shipment_key",         # tracking_id, else shipment_id
    "shipment_position",    # Position in the shipment input
    "quote_index",          # Position in the quote input
]

# Shipment columns carried onto every matched quote
MATCHED_SHIPMENT_COLS = [
    "shipment_key",
    "shipment_position",
    "shipment_id",
    "tracking_id",
    "current_rate",
    "weight",
    "service_type",
    "account_used",
]

SAVINGS_COLS = [
    "dollar_savings",       # current_rate - rate
    "percent_savings",      # dollar_savings / current_rate * 100 (0 if no current cost)
    "is_win",               # dollar_savings > 0
]

STAT_COLS = [
    "total_spend",
    "shipments_quoted",
    "wins",
    "win_rate",
    "average_rate",
    "avg_dollar_savings",
    "avg_percent_savings",
    "median_dollar_savings",
    "median_percent_savings",
    "total_savings",
    "total_savings_percent",
    "current_cost",
]

# best_rate_wins: shipments where the account holds the cheapest quote
ACCOUNT_STAT_COLS = ["account_name"] + STAT_COLS + ["best_rate_wins"]

SERVICE_STAT_COLS = ["service_type", "account_name"] + STAT_COLS


# =============================================================================
# VALIDATION
# =============================================================================

def validate_columns(df: pl.DataFrame, required: list[str], label: str) -> None:
    """
    Check that a DataFrame carries the required columns.

    Raises:
        ValueError: Listing every missing column
    """
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(f"{label} is missing required columns: {', '.join(missing)}")
