"""
Integration tests for ContractsService.

The service is pure glue: every test drives a payload through
validation, the lifecycle and the pricing engines and checks the
resulting contract value, warnings and log events.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from seafood_config.schema import ContractSettings, PricingSettings
from seafood_kernel.domain.values import ContractStatus, ContractType, PenaltyRule
from seafood_kernel.exceptions import (
    ContractClosedError,
    ContractNotClosedError,
    ConversionFactorRequiredError,
    InvalidTransitionError,
    OutOfRangeError,
    ValidationError,
)
from seafood_modules.contracts import ContractsService
from seafood_modules.contracts.validator import PRICE_JUMP, SUPPLIER_REQUIRED


class TestCreateContract:

    def test_create_generates_id(self, service, contract_payload):
        actor = uuid4()
        outcome = service.create_contract(contract_payload, created_by=actor)
        contract = outcome.contract

        assert contract.id.startswith("L10400000.")
        assert contract.status is ContractStatus.OPEN
        assert contract.version == 1
        assert contract.created_by == actor
        assert contract.supplier_filled is False
        assert not outcome.has_warnings

    def test_create_keeps_explicit_id(self, service, contract_payload):
        contract_payload["id"] = "L87654321.001.00"
        assert service.create_contract(contract_payload).contract.id == "L87654321.001.00"

    def test_create_invalid_payload(self, service, contract_payload):
        del contract_payload["supplier_name"]

        with pytest.raises(ValidationError) as exc_info:
            service.create_contract(contract_payload)
        assert exc_info.value.error_codes == (SUPPLIER_REQUIRED,)

    def test_create_returns_price_jump_warnings(self, service, contract_payload):
        contract_payload["base_pricing"] = [
            {"size": 20, "price": 100000},
            {"size": 30, "price": 200000},
        ]
        outcome = service.create_contract(contract_payload)

        assert outcome.has_warnings
        assert outcome.warnings[0].code == PRICE_JUMP

    def test_create_logged(self, captured_logs, service, contract_payload):
        contract = service.create_contract(contract_payload).contract

        created = [r for r in captured_logs() if r["message"] == "contract_created"]
        assert created[0]["contract_id"] == contract.id
        assert created[0]["price_point_count"] == 2
        assert created[0]["penalty_count"] == 1


class TestUpdatePricing:

    def test_update_both_sections(self, service, open_contract):
        outcome = service.update_pricing(open_contract, {
            "base_pricing": [{"size": 20, "price": 160000}, {"size": 40, "price": 100000}],
            "size_penalties": [{"range": "35-40", "penalty_amount": 2000, "unit": "Rp/s"}],
        })
        updated = outcome.contract

        assert [p.size for p in updated.base_pricing] == [Decimal("20"), Decimal("40")]
        assert updated.size_penalties == (
            PenaltyRule(range_label="35-40", amount=Decimal("2000"), unit="Rp/s"),
        )
        assert updated.version == 2

    def test_update_penalties_only_keeps_prices(self, service, open_contract):
        updated = service.update_pricing(open_contract, {"size_penalties": []}).contract

        assert updated.base_pricing == open_contract.base_pricing
        assert updated.size_penalties == ()

    def test_update_closed_contract(self, service, closed_contract):
        with pytest.raises(ContractClosedError):
            service.update_pricing(closed_contract, {"size_penalties": []})

    def test_update_invalid_payload(self, service, open_contract):
        with pytest.raises(ValidationError):
            service.update_pricing(open_contract, {})

    def test_update_returns_warnings(self, service, open_contract):
        outcome = service.update_pricing(open_contract, {
            "base_pricing": [{"size": 20, "price": 10}, {"size": 30, "price": 100}],
        })
        assert [w.size for w in outcome.warnings] == [Decimal("30")]


class TestUpdateDeliveries:

    def test_submit_deliveries(self, service, open_contract, deliveries_payload):
        updated = service.update_deliveries(open_contract, deliveries_payload).contract

        assert len(updated.deliveries) == 2
        assert updated.supplier_filled is True
        assert updated.version == 2

    def test_submit_with_contract_type(self, service, open_contract, deliveries_payload):
        deliveries_payload["contract_type"] = "Add"
        updated = service.update_deliveries(open_contract, deliveries_payload).contract

        assert updated.contract_type is ContractType.ADD
        assert updated.version == 2

    def test_submit_on_closed_contract(self, service, closed_contract, deliveries_payload):
        with pytest.raises(ContractClosedError):
            service.update_deliveries(closed_contract, deliveries_payload)


class TestUpdateStatus:

    def test_close(self, service, open_contract):
        closed = service.update_status(open_contract, {"status": "Closed"}).contract

        assert closed.status is ContractStatus.CLOSED
        assert closed.version == 2

    def test_close_twice(self, service, closed_contract):
        with pytest.raises(InvalidTransitionError):
            service.update_status(closed_contract, {"status": "Closed"})

    def test_reopen(self, service, closed_contract):
        with pytest.raises(InvalidTransitionError) as exc_info:
            service.update_status(closed_contract, {"status": "Open"})
        assert exc_info.value.to_status == "Open"

    def test_open_to_open(self, service, open_contract):
        with pytest.raises(InvalidTransitionError):
            service.update_status(open_contract, {"status": "Open"})

    def test_invalid_status(self, service, open_contract):
        with pytest.raises(ValidationError):
            service.update_status(open_contract, {"status": "Done"})

    def test_closed_contract_still_quotes(self, service, closed_contract):
        quote = service.quote(closed_contract, Decimal("25"), Decimal("2"))
        assert quote.total_price == Decimal("280000.00")


class TestQuotes:

    def test_quote_uses_price_quantum(self, service, open_contract):
        quote = service.quote(open_contract, Decimal("25"), Decimal("2"))

        assert quote.base_price == Decimal("135000")
        assert quote.penalty_total == Decimal("5000")
        assert quote.unit_price == Decimal("140000.00")
        assert str(quote.unit_price) == "140000.00"

    def test_quote_binds_contract_context(self, captured_logs, service, open_contract):
        service.quote(open_contract, Decimal("25"), Decimal("1"))

        traces = [r for r in captured_logs() if r["message"] == "SEAFOOD_ENGINE_TRACE"]
        assert traces
        assert all(r["contract_id"] == open_contract.id for r in traces)

    def test_out_of_range_rejected_by_default(self, service, open_contract):
        with pytest.raises(OutOfRangeError):
            service.quote(open_contract, Decimal("45"), Decimal("1"))

    def test_schedule_rejects_by_default(self, service, open_contract):
        with pytest.raises(OutOfRangeError):
            service.price_schedule(open_contract, [Decimal("20"), Decimal("45")])

    def test_schedule_clamps_when_configured(self, clock, rng, open_contract):
        settings = ContractSettings(pricing=PricingSettings(out_of_range_policy="clamp"))
        service = ContractsService(settings=settings, clock=clock, rng=rng)

        lines = service.price_schedule(open_contract, [Decimal("45"), Decimal("25")])

        assert [line.unit_price for line in lines] == [Decimal("120000.00"), Decimal("140000.00")]

    def test_per_kg_penalty_needs_weight_factor(self, service, open_contract):
        contract = open_contract.with_changes(size_penalties=(
            PenaltyRule(range_label="20-25", amount=Decimal("1000"), unit="Rp/kg"),
        ))
        with pytest.raises(ConversionFactorRequiredError):
            service.quote(contract, Decimal("22"), Decimal("1"))

    def test_per_kg_penalty_with_weight_factor(self, clock, rng, open_contract):
        service = ContractsService(
            clock=clock, rng=rng, weight_factor=lambda size: Decimal("0.5"),
        )
        contract = open_contract.with_changes(size_penalties=(
            PenaltyRule(range_label="20-25", amount=Decimal("1000"), unit="Rp/kg"),
        ))

        quote = service.quote(contract, Decimal("20"), Decimal("1"))
        assert quote.unit_price == Decimal("150500.00")


class TestTransfer:

    def test_transfer_closed_contract(self, service, closed_contract, clock):
        actor = uuid4()
        transfer = service.transfer(closed_contract, transferred_by=actor, notes="batch 7")

        assert transfer.contract_id == closed_contract.id
        assert transfer.transferred_by == actor
        assert transfer.transfer_date == clock.now_utc()
        assert transfer.notes == "batch 7"

    def test_transfer_open_contract(self, service, open_contract):
        with pytest.raises(ContractNotClosedError):
            service.transfer(open_contract, transferred_by=uuid4())


class TestFullFlow:

    def test_negotiate_fill_close_transfer(self, service, contract_payload, deliveries_payload):
        actor = uuid4()
        contract = service.create_contract(contract_payload, created_by=actor).contract
        contract = service.update_pricing(contract, {
            "size_penalties": [{"range": "26-30", "penalty_amount": 1000, "unit": "Rp/sz"}],
        }).contract
        contract = service.update_deliveries(contract, deliveries_payload).contract
        contract = service.update_status(contract, {"status": "Closed"}).contract

        assert contract.version == 4
        assert contract.is_closed

        quote = service.quote(contract, Decimal("28"), Decimal("1"))
        # 150000 - 30000 * 8 / 10 = 126000, plus the 26-30 penalty
        assert quote.unit_price == Decimal("127000.00")

        transfer = service.transfer(contract, transferred_by=actor)
        assert transfer.total_tons == Decimal("2.5")
