"""
Account Assignment

Selection state at three scopes and the projected savings it implies.

PRECEDENCE
----------
    resolve(shipment) = individual[shipment_key]
                        ?? service[service_type]
                        ?? global_account

effective_account() falls back further when resolve() returns None:
    1. The account persisted on the shipment (account_used), if it quoted
       the shipment's service
    2. The best-performing account for the shipment's service

RECOMPUTATION
-------------
Projected metrics are recomputed in full after every state change, by
resolving each shipment's effective account and joining its best rate. No
incremental caching.

The selector is owned by one session at a time; callers serialize mutations.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

import polars as pl

from .markup import MarkupConfig, apply_markup
from .models import AccountId, ShipmentRecord, shipment_records, shipments_frame
from .ranking import Ranking, WinRate
from .services import aggregate_services, rank_service_accounts, service_accounts, service_types


logger = logging.getLogger(__name__)

SOURCE_INDIVIDUAL = "individual"
SOURCE_SERVICE = "service"
SOURCE_GLOBAL = "global"
SOURCE_PERSISTED = "persisted"
SOURCE_DEFAULT = "default"


# =============================================================================
# STATE
# =============================================================================

@dataclass
class AssignmentState:
    """Account selections at global, service and shipment scope."""

    global_account: AccountId | None = None
    service: dict[str, AccountId] = field(default_factory=dict)
    individual: dict[str, AccountId] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return self.global_account is None and not self.service and not self.individual


def resolve_account(
    state: AssignmentState,
    shipment_key: str,
    service_type: str,
) -> AccountId | None:
    """Precedence lookup: individual, then service, then global."""
    if shipment_key in state.individual:
        return state.individual[shipment_key]
    if service_type in state.service:
        return state.service[service_type]
    return state.global_account


def majority_accounts(shipments: pl.DataFrame) -> dict[str, AccountId]:
    """
    Most common persisted account_used per service_type.

    Ties go to the account seen first. Services without any persisted
    account are omitted.
    """
    counts = (
        shipments
        .filter(pl.col("account_used").is_not_null())
        .group_by(["service_type", "account_used"], maintain_order=True)
        .agg(pl.len().alias("n"))
        .sort("n", descending=True, maintain_order=True)
    )

    majority: dict[str, AccountId] = {}
    for row in counts.iter_rows(named=True):
        majority.setdefault(row["service_type"], AccountId(row["account_used"]))
    return majority


# =============================================================================
# PROJECTION
# =============================================================================

@dataclass(frozen=True)
class ProjectedMetrics:
    """Savings implied by the current assignment."""

    total_optimized_savings: float = 0.0
    optimized_shipment_count: int = 0
    optimized_cost: float = 0.0
    current_cost: float = 0.0           # current cost of the optimized shipments
    total_shipments: int = 0
    unquoted_shipment_count: int = 0    # effective account has no quote for the shipment

    @property
    def savings_percent(self) -> float:
        if self.current_cost == 0:
            return 0.0
        return self.total_optimized_savings / self.current_cost * 100


def project_savings(
    assignments: pl.DataFrame,
    best_rates: pl.DataFrame,
    rate_col: str = "rate_amount",
) -> ProjectedMetrics:
    """
    Sum best-rate savings for each shipment under its assigned account.

    Args:
        assignments: Frame with shipment_key, current_rate, assigned_account
        best_rates: Output of reduce_best_rates() (optionally with markup)
        rate_col: Rate column charged under the assigned account

    Returns:
        ProjectedMetrics. Shipments without an assigned account, or whose
        account has no quote for them, do not contribute savings.
    """
    total = assignments.height
    if total == 0:
        return ProjectedMetrics()

    rates = best_rates.select([
        pl.col("shipment_key"),
        pl.col("account_name").alias("assigned_account"),
        pl.col(rate_col).alias("_assigned_rate"),
    ])
    joined = assignments.join(rates, on=["shipment_key", "assigned_account"], how="left")

    optimized = joined.filter(pl.col("_assigned_rate").is_not_null())
    assigned = joined.filter(pl.col("assigned_account").is_not_null()).height

    return ProjectedMetrics(
        total_optimized_savings=float((optimized["current_rate"] - optimized["_assigned_rate"]).sum()),
        optimized_shipment_count=optimized.height,
        optimized_cost=float(optimized["_assigned_rate"].sum()),
        current_cost=float(optimized["current_rate"].sum()),
        total_shipments=total,
        unquoted_shipment_count=assigned - optimized.height,
    )


def persist_assignments(shipments: pl.DataFrame, assignments: pl.DataFrame) -> pl.DataFrame:
    """
    Write assigned accounts into account_used.

    Shipments without an assignment keep their persisted value. The result is
    handed to the persistence layer; nothing is stored here.
    """
    return (
        shipments
        .with_columns(pl.Series("assigned_account", assignments["assigned_account"], dtype=pl.Utf8))
        .with_columns(
            pl.coalesce("assigned_account", "account_used").alias("account_used")
        )
        .drop("assigned_account")
    )


# =============================================================================
# SELECTOR
# =============================================================================

class AssignmentSelector:
    """
    Mutable account selection over one analysis.

    Args:
        shipments: Shipment frame or records
        best_rates: Output of reduce_best_rates()
        service_stats: Output of aggregate_services() (computed if omitted)
        markup: Optional markup; savings are then projected on final_rate
        ranking: Picks the default account per service
    """

    def __init__(
        self,
        shipments: pl.DataFrame | list[ShipmentRecord],
        best_rates: pl.DataFrame,
        service_stats: pl.DataFrame | None = None,
        markup: MarkupConfig | None = None,
        ranking: type[Ranking] = WinRate,
    ):
        self.shipments = shipments_frame(shipments)

        if markup is not None:
            self._rates = apply_markup(best_rates, markup)
            self._rate_col = "final_rate"
        else:
            self._rates = best_rates
            self._rate_col = "rate_amount"

        if service_stats is None:
            service_stats = aggregate_services(best_rates, ranking)
        self.service_stats = service_stats
        self._valid = service_accounts(service_stats)

        self._defaults: dict[str, AccountId] = {}
        for service in service_types(service_stats):
            top = ranking.best(rank_service_accounts(service_stats, service, ranking))
            if top is not None:
                self._defaults[service] = AccountId(top["account_name"])

        self._persisted: dict[str, AccountId] = {
            row["shipment_key"]: AccountId(row["account_used"])
            for row in self.shipments.select(["shipment_key", "account_used"]).iter_rows(named=True)
            if row["account_used"] is not None
        }

        majority = majority_accounts(self.shipments)
        initial = {
            service: account
            for service, account in majority.items()
            if account in self._valid.get(service, [])
        }
        self.state = AssignmentState(service=initial)
        for service in majority.keys() - initial.keys():
            logger.info("Ignored persisted account for %s: no quotes for this service", service)
        self.metrics = ProjectedMetrics()
        self._recompute()

    # -------------------------------------------------------------------------
    # MUTATIONS
    # -------------------------------------------------------------------------

    def set_global(self, account: AccountId | None) -> None:
        """Set the global account. Service and shipment overrides stay in place."""
        self.state.global_account = account
        self._recompute()

    def set_service_account(self, service_type: str, account: AccountId) -> bool:
        """
        Override the account for one service.

        Returns:
            False (and no change) if the account has no quotes for the service
        """
        if account not in self._valid.get(service_type, []):
            logger.info("Rejected %s for %s: no quotes for this service", account, service_type)
            return False
        self.state.service[service_type] = account
        self._recompute()
        return True

    def set_individual(self, shipment_key: str, account: AccountId) -> None:
        """Override the account for one shipment."""
        self.state.individual[shipment_key] = account
        self._recompute()

    def clear_all(self) -> None:
        """Drop every selection; persisted accounts and service defaults apply."""
        self.state = AssignmentState()
        self._recompute()

    def select_account_for_all_services(self, account: AccountId) -> list[str]:
        """
        Assign the account to every service it quoted.

        Services without a quote from the account keep their current selection.

        Returns:
            Service types that were updated
        """
        updated = [s for s, accounts in self._valid.items() if account in accounts]
        for service in updated:
            self.state.service[service] = account
        if updated:
            self._recompute()
        return updated

    # -------------------------------------------------------------------------
    # LOOKUPS
    # -------------------------------------------------------------------------

    def resolve(self, shipment: ShipmentRecord | Mapping) -> AccountId | None:
        """Selected account for a shipment, or None if nothing is selected."""
        key, service = _identity(shipment)
        return resolve_account(self.state, key, service)

    def effective_account(self, shipment: ShipmentRecord | Mapping) -> AccountId | None:
        """Selected account, else persisted account, else the service default."""
        key, service = _identity(shipment)
        return self._effective(key, service)[0]

    def valid_accounts(self, service_type: str) -> list[AccountId]:
        """Accounts with quotes for a service, in ranked order."""
        return list(self._valid.get(service_type, []))

    def assignments(self) -> pl.DataFrame:
        """
        Effective assignment per shipment, in shipment order.

        Returns:
            DataFrame with shipment_key, service_type, current_rate,
            assigned_account and assignment_source
        """
        rows = self.shipments.select(["shipment_key", "service_type", "current_rate"])
        resolved = [self._effective(k, s) for k, s in zip(rows["shipment_key"], rows["service_type"])]

        return rows.with_columns([
            pl.Series("assigned_account", [r[0] for r in resolved], dtype=pl.Utf8),
            pl.Series("assignment_source", [r[1] for r in resolved], dtype=pl.Utf8),
        ])

    # -------------------------------------------------------------------------
    # PERSISTENCE HOOK
    # -------------------------------------------------------------------------

    def apply_assignments(self) -> pl.DataFrame:
        """Shipment frame with account_used set to the effective assignment."""
        return persist_assignments(self.shipments, self.assignments())

    def apply_assignment_records(self) -> list[ShipmentRecord]:
        """Same as apply_assignments(), as records."""
        return shipment_records(self.apply_assignments())

    # -------------------------------------------------------------------------
    # INTERNALS
    # -------------------------------------------------------------------------

    def _effective(self, key: str, service: str) -> tuple[AccountId | None, str | None]:
        if key in self.state.individual:
            return self.state.individual[key], SOURCE_INDIVIDUAL
        if service in self.state.service:
            return self.state.service[service], SOURCE_SERVICE
        if self.state.global_account is not None:
            return self.state.global_account, SOURCE_GLOBAL
        persisted = self._persisted.get(key)
        if persisted is not None and persisted in self._valid.get(service, []):
            return persisted, SOURCE_PERSISTED
        if service in self._defaults:
            return self._defaults[service], SOURCE_DEFAULT
        return None, None

    def _recompute(self) -> None:
        self.metrics = project_savings(self.assignments(), self._rates, self._rate_col)
        logger.debug(
            "Projected savings %.2f over %d of %d shipment(s)",
            self.metrics.total_optimized_savings,
            self.metrics.optimized_shipment_count,
            self.metrics.total_shipments,
        )


def _identity(shipment: ShipmentRecord | Mapping) -> tuple[str, str]:
    """(shipment_key, service_type) of a record or frame row."""
    if isinstance(shipment, ShipmentRecord):
        return shipment.key, shipment.service_type
    return shipment["shipment_key"], shipment["service_type"]
