"""
Pytest fixtures for the seafood contract engine test suite.

Everything here is pure: settings, a deterministic clock and random
source, sample payloads and contract values.  The ORM tests build their
own in-memory SQLite engine.
"""

import json
import logging
import random
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from seafood_config.schema import ContractSettings
from seafood_kernel.domain.clock import DeterministicClock
from seafood_kernel.domain.values import (
    Contract,
    ContractStatus,
    ContractType,
    Delivery,
    PenaltyRule,
    PricePoint,
)
from seafood_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from seafood_modules.contracts.service import ContractsService

# Test actor ID for all test operations
TEST_ACTOR_ID = uuid4()

SAMPLE_CONTRACT_ID = "L12345678.123.00"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture seafood_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, service, open_contract):
            service.quote(open_contract, Decimal("25"), Decimal("1"))
            logs = captured_logs()
            assert any(r["message"] == "price_resolved" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("seafood_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Settings, time and randomness
# =============================================================================


@pytest.fixture
def settings() -> ContractSettings:
    return ContractSettings()


@pytest.fixture
def clock() -> DeterministicClock:
    return DeterministicClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def service(settings, clock, rng) -> ContractsService:
    return ContractsService(settings=settings, clock=clock, rng=rng)


# =============================================================================
# Payloads and contracts
# =============================================================================


@pytest.fixture
def contract_payload() -> dict:
    """A valid create-contract request body."""
    return {
        "contract_type": "New",
        "supplier_name": "PT Bahari Segar",
        "base_pricing": [
            {"size": 30, "price": 120000},
            {"size": 20, "price": 150000},
        ],
        "size_penalties": [
            {"range": "20-25", "penalty_amount": 5000, "unit": "Rp/sz"},
        ],
    }


@pytest.fixture
def deliveries_payload() -> dict:
    return {
        "deliveries": [
            {"date": "2024-02-01", "quantity": 2, "unit": "mt", "sizeRange": "20-25"},
            {"date": "2024-02-08", "quantity": 500, "unit": "kg", "sizeRange": "26-30"},
        ],
    }


@pytest.fixture
def open_contract() -> Contract:
    return Contract(
        id=SAMPLE_CONTRACT_ID,
        contract_type=ContractType.NEW,
        base_pricing=(
            PricePoint(size=Decimal("20"), price=Decimal("150000")),
            PricePoint(size=Decimal("30"), price=Decimal("120000")),
        ),
        supplier_name="PT Bahari Segar",
        size_penalties=(
            PenaltyRule(range_label="20-25", amount=Decimal("5000"), unit="Rp/sz"),
        ),
        created_by=TEST_ACTOR_ID,
    )


@pytest.fixture
def closed_contract(open_contract) -> Contract:
    return open_contract.with_changes(
        status=ContractStatus.CLOSED,
        deliveries=(
            Delivery(date="2024-02-01", quantity=Decimal("2"), unit="mt", size_range="20-25"),
            Delivery(date="2024-02-08", quantity=Decimal("500"), unit="kg", size_range="26-30"),
        ),
        supplier_filled=True,
        version=3,
    )
