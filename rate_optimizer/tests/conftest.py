"""
Shared fixtures for rate optimizer tests.

The reference scenario: 3 shipments, 2 accounts.

    shipment  service   current   A      B
    T1        Ground    100       80     90
    T2        Ground     50       60     40
    T3        Express    70       65     -
"""

import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

import pytest

from rate_optimizer.best_rates import reduce_best_rates
from rate_optimizer.matching import match_quotes
from rate_optimizer.models import RateQuote, ShipmentRecord


@pytest.fixture
def shipments():
    return [
        ShipmentRecord(id=1, tracking_id="T1", current_rate=100.0, service_type="Ground", weight=5.0, shipment_index=0),
        ShipmentRecord(id=2, tracking_id="T2", current_rate=50.0, service_type="Ground", weight=2.0, shipment_index=1),
        ShipmentRecord(id=3, tracking_id="T3", current_rate=70.0, service_type="Express", weight=3.5, shipment_index=2),
    ]


@pytest.fixture
def quotes():
    return [
        RateQuote(account_name="A", rate_amount=80.0, shipment_index=0, carrier_type="UPS",
                  service_code="03", service_name="UPS Ground", quoted_tracking_id="T1"),
        RateQuote(account_name="B", rate_amount=90.0, shipment_index=0, carrier_type="FEDEX",
                  service_code="FG", service_name="FedEx Ground", quoted_tracking_id="T1"),
        RateQuote(account_name="A", rate_amount=60.0, shipment_index=1, carrier_type="UPS",
                  service_code="03", service_name="UPS Ground", quoted_tracking_id="T2"),
        RateQuote(account_name="B", rate_amount=40.0, shipment_index=1, carrier_type="FEDEX",
                  service_code="FG", service_name="FedEx Ground", quoted_tracking_id="T2"),
        RateQuote(account_name="A", rate_amount=65.0, shipment_index=2, carrier_type="UPS",
                  service_code="02", service_name="UPS 2nd Day Air", quoted_tracking_id="T3"),
    ]


@pytest.fixture
def best_rates(shipments, quotes):
    matched, _ = match_quotes(quotes, shipments)
    return reduce_best_rates(matched)


@pytest.fixture
def empty_best_rates():
    matched, _ = match_quotes([], [])
    return reduce_best_rates(matched)
