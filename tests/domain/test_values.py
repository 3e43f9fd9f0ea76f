"""
Tests for the contract value objects.

Covers:
- Decimal coercion rules
- PricePoint / PenaltyRule / Delivery invariants and document shapes
- Contract invariants (pricing, supplier reference, version)
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from seafood_kernel.domain.values import (
    Contract,
    ContractStatus,
    ContractType,
    Delivery,
    DeliveryUnit,
    PenaltyRule,
    PenaltyUnit,
    PricePoint,
    to_decimal,
)
from seafood_kernel.exceptions import (
    DuplicateSizeError,
    EmptyPriceTableError,
    UnsupportedUnitError,
)


class TestToDecimal:

    def test_float_goes_through_str(self):
        assert to_decimal(25.5) == Decimal("25.5")
        assert str(to_decimal(0.1)) == "0.1"

    def test_int_and_str(self):
        assert to_decimal(20) == Decimal("20")
        assert to_decimal(" 120000.50 ") == Decimal("120000.50")

    @pytest.mark.parametrize("value", [None, True, [1]])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(TypeError):
            to_decimal(value)

    @pytest.mark.parametrize("value", ["abc", "NaN", "Infinity"])
    def test_rejects_invalid_or_non_finite(self, value):
        with pytest.raises(ValueError):
            to_decimal(value)


class TestPricePoint:

    def test_coerces_to_decimal(self):
        point = PricePoint(size=20, price="150000")
        assert point.size == Decimal("20")
        assert point.price == Decimal("150000")

    def test_zero_price_allowed(self):
        assert PricePoint(size=20, price=0).price == Decimal("0")

    @pytest.mark.parametrize("size", [0, -5])
    def test_size_must_be_positive(self, size):
        with pytest.raises(ValueError):
            PricePoint(size=size, price=1)

    def test_price_cannot_be_negative(self):
        with pytest.raises(ValueError):
            PricePoint(size=20, price=-1)

    def test_frozen(self):
        point = PricePoint(size=20, price=1)
        with pytest.raises(AttributeError):
            point.price = Decimal("2")


class TestPenaltyRule:

    def test_unit_parsed(self):
        rule = PenaltyRule(range_label="20-25", amount=5000, unit="Rp/kg")
        assert rule.unit is PenaltyUnit.RP_PER_KG
        assert rule.unit.requires_weight_factor

    def test_unknown_unit_raises(self):
        with pytest.raises(UnsupportedUnitError) as exc_info:
            PenaltyRule(range_label="20-25", amount=5000, unit="USD/kg")
        assert exc_info.value.unit == "USD/kg"
        assert exc_info.value.allowed == ("Rp/s", "Rp/kg", "Rp/sz")

    def test_blank_label_rejected(self):
        with pytest.raises(ValueError):
            PenaltyRule(range_label="  ", amount=1, unit="Rp/s")

    @pytest.mark.parametrize("key", ["amount", "penalty_amount"])
    def test_from_dict_accepts_either_amount_key(self, key):
        rule = PenaltyRule.from_dict({"range": "20-25", key: "5000", "unit": "Rp/sz"})
        assert rule.amount == Decimal("5000")


class TestDelivery:

    @pytest.mark.parametrize(
        "unit, quantity, tons",
        [
            ("kg", "500", Decimal("0.5")),
            ("mt", "2", Decimal("2")),
            ("ton", "3.25", Decimal("3.25")),
        ],
    )
    def test_quantity_tons(self, unit, quantity, tons):
        delivery = Delivery(date="2024-02-01", quantity=quantity, unit=unit, size_range="20-25")
        assert delivery.quantity_tons == tons

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValueError):
            Delivery(date="2024-02-01", quantity=0, unit="kg", size_range="20-25")

    def test_unknown_unit_raises(self):
        with pytest.raises(UnsupportedUnitError) as exc_info:
            Delivery(date="2024-02-01", quantity=1, unit="lb", size_range="20-25")
        assert exc_info.value.kind == "delivery"

    def test_document_uses_size_range_camel_case(self):
        delivery = Delivery(date="2024-02-01", quantity=2, unit=DeliveryUnit.MT, size_range="20-25")
        document = delivery.to_dict()

        assert document == {"date": "2024-02-01", "quantity": "2", "unit": "mt", "sizeRange": "20-25"}
        assert Delivery.from_dict(document) == delivery


class TestContract:

    def _contract(self, **overrides) -> Contract:
        fields = {
            "id": "L12345678.123.00",
            "contract_type": "New",
            "base_pricing": (PricePoint(size=30, price=120000), PricePoint(size=20, price=150000)),
            "supplier_name": "PT Bahari Segar",
        }
        fields.update(overrides)
        return Contract(**fields)

    def test_defaults(self):
        contract = self._contract()

        assert contract.status is ContractStatus.OPEN
        assert contract.contract_type is ContractType.NEW
        assert contract.version == 1
        assert contract.supplier_filled is False
        assert contract.deliveries == ()

    def test_base_pricing_sorted(self):
        contract = self._contract()
        assert [p.size for p in contract.base_pricing] == [Decimal("20"), Decimal("30")]

    def test_empty_pricing_rejected(self):
        with pytest.raises(EmptyPriceTableError):
            self._contract(base_pricing=())

    def test_duplicate_sizes_rejected(self):
        with pytest.raises(DuplicateSizeError):
            self._contract(base_pricing=(PricePoint(size=20, price=1), PricePoint(size=20, price=2)))

    def test_supplier_required(self):
        with pytest.raises(ValueError, match="Exactly one"):
            self._contract(supplier_name=None)

    def test_supplier_conflict(self):
        with pytest.raises(ValueError, match="Exactly one"):
            self._contract(supplier_id=uuid4())

    def test_supplier_id_only(self):
        supplier = uuid4()
        contract = self._contract(supplier_name=None, supplier_id=supplier)
        assert contract.supplier_ref == supplier

    def test_version_must_be_positive(self):
        with pytest.raises(ValueError):
            self._contract(version=0)

    def test_with_changes_revalidates(self):
        contract = self._contract()
        with pytest.raises(EmptyPriceTableError):
            contract.with_changes(base_pricing=())
        assert contract.with_changes(status="Closed").is_closed
