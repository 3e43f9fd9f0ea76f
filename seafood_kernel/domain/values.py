"""
Value objects for seafood purchase contracts (``seafood_kernel.domain.values``).

Responsibility
--------------
Frozen dataclasses and enums for the nouns of contract pricing: price
points, size penalty rules, deliveries and the contract itself.  Every
amount, size and quantity is a ``Decimal``.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  No imports from
``seafood_engines``, ``seafood_modules`` or ``seafood_config``.

Invariants enforced
-------------------
* PricePoint: size > 0, price >= 0.
* PenaltyRule: non-empty range label, unit is a recognized ``PenaltyUnit``.
* Delivery: quantity > 0, unit is a recognized ``DeliveryUnit``.
* Contract: at least one price point, pairwise distinct sizes (stored sorted
  ascending), exactly one supplier reference.

Business limits that are configurable (max size, max price, label lengths)
are checked by the contract validator, not here.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Self
from uuid import UUID

from seafood_kernel.exceptions import (
    DuplicateSizeError,
    EmptyPriceTableError,
    UnsupportedUnitError,
)

CONTRACT_ID_PATTERN = r"^L[0-9]{8}\.[0-9]{3}\.00\Z"


def to_decimal(value: Any, name: str = "value") -> Decimal:
    """Convert an int, str, float or Decimal to Decimal.

    Floats go through ``str()`` so ``25.5`` becomes ``Decimal("25.5")``
    rather than its binary expansion.

    Raises:
        TypeError: value is None, a bool, or an unsupported type.
        ValueError: value is not a finite number.
    """
    if value is None or isinstance(value, bool):
        raise TypeError(f"{name} must be a number, got {type(value).__name__}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ValueError(f"{name} must be a valid decimal, got {value!r}") from exc
    else:
        raise TypeError(f"{name} must be a number, got {type(value).__name__}")
    if not result.is_finite():
        raise ValueError(f"{name} must be finite, got {value!r}")
    return result


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ContractType(str, Enum):
    """Kind of purchase contract."""

    NEW = "New"
    ADD = "Add"
    CHANGE = "Change"


class ContractStatus(str, Enum):
    """Contract lifecycle status. CLOSED is terminal."""

    OPEN = "Open"
    CLOSED = "Closed"


class PenaltyUnit(str, Enum):
    """Unit of a size penalty amount."""

    RP_PER_S = "Rp/s"
    RP_PER_KG = "Rp/kg"
    RP_PER_SZ = "Rp/sz"

    @classmethod
    def parse(cls, value: Any) -> PenaltyUnit:
        """Parse a unit string; raises UnsupportedUnitError if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedUnitError(
                value, tuple(u.value for u in cls), kind="penalty"
            ) from None

    @property
    def requires_weight_factor(self) -> bool:
        return self is PenaltyUnit.RP_PER_KG


class DeliveryUnit(str, Enum):
    """Unit of a delivery quantity."""

    MT = "mt"
    KG = "kg"
    TON = "ton"

    @classmethod
    def parse(cls, value: Any) -> DeliveryUnit:
        """Parse a unit string; raises UnsupportedUnitError if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedUnitError(
                value, tuple(u.value for u in cls), kind="delivery"
            ) from None

    @property
    def kilograms(self) -> Decimal:
        """Kilograms per one unit (mt and ton are metric tons)."""
        return Decimal("1") if self is DeliveryUnit.KG else Decimal("1000")


# ---------------------------------------------------------------------------
# Price points and penalty rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PricePoint:
    """A (size, price) anchor in a contract's price table."""

    size: Decimal
    price: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "size", to_decimal(self.size, "size"))
        object.__setattr__(self, "price", to_decimal(self.price, "price"))
        if self.size <= Decimal("0"):
            raise ValueError(f"size must be positive: {self.size}")
        if self.price < Decimal("0"):
            raise ValueError(f"price cannot be negative: {self.price}")

    def to_dict(self) -> dict[str, str]:
        return {"size": str(self.size), "price": str(self.price)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(size=data["size"], price=data["price"])


@dataclass(frozen=True)
class PenaltyRule:
    """A surcharge applied on top of the base price for a size band.

    ``range_label`` is opaque to the engine; a caller-supplied classifier
    decides which sizes it covers.
    """

    range_label: str
    amount: Decimal
    unit: PenaltyUnit

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount, "amount"))
        object.__setattr__(self, "unit", PenaltyUnit.parse(self.unit))
        if not isinstance(self.range_label, str) or not self.range_label.strip():
            raise ValueError("range_label must be a non-empty string")

    def to_dict(self) -> dict[str, str]:
        # Persisted documents use the original "penalty_amount" key
        return {
            "range": self.range_label,
            "penalty_amount": str(self.amount),
            "unit": self.unit.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        amount = data["amount"] if "amount" in data else data["penalty_amount"]
        return cls(range_label=data["range"], amount=amount, unit=data["unit"])


@dataclass(frozen=True)
class Delivery:
    """A delivery scheduled by the supplier."""

    date: str
    quantity: Decimal
    unit: DeliveryUnit
    size_range: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", to_decimal(self.quantity, "quantity"))
        object.__setattr__(self, "unit", DeliveryUnit.parse(self.unit))
        if self.quantity <= Decimal("0"):
            raise ValueError(f"quantity must be positive: {self.quantity}")

    @property
    def quantity_kg(self) -> Decimal:
        return self.quantity * self.unit.kilograms

    @property
    def quantity_tons(self) -> Decimal:
        return self.quantity_kg / Decimal("1000")

    def to_dict(self) -> dict[str, str]:
        return {
            "date": self.date,
            "quantity": str(self.quantity),
            "unit": self.unit.value,
            "sizeRange": self.size_range,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        size_range = data["sizeRange"] if "sizeRange" in data else data["size_range"]
        return cls(
            date=data["date"],
            quantity=data["quantity"],
            unit=data["unit"],
            size_range=size_range,
        )


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Contract:
    """
    A negotiated purchase agreement between the GM and one supplier.

    Contract:
        Frozen; edits produce new instances via the lifecycle.
    Guarantees:
        - ``base_pricing`` is non-empty, sorted by size, sizes distinct.
        - Exactly one of ``supplier_id`` / ``supplier_name`` is set.
        - ``version`` starts at 1 and is the caller's optimistic-concurrency
          token; the lifecycle increments it on every accepted edit.
    Non-goals:
        - Does not enforce who may edit it.
    """

    id: str
    contract_type: ContractType
    base_pricing: tuple[PricePoint, ...]
    supplier_id: UUID | None = None
    supplier_name: str | None = None
    size_penalties: tuple[PenaltyRule, ...] = ()
    status: ContractStatus = ContractStatus.OPEN
    deliveries: tuple[Delivery, ...] = ()
    supplier_filled: bool = False
    version: int = 1
    created_by: UUID | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "contract_type", ContractType(self.contract_type))
        object.__setattr__(self, "status", ContractStatus(self.status))
        object.__setattr__(
            self, "base_pricing", normalize_price_points(self.base_pricing)
        )
        object.__setattr__(self, "size_penalties", tuple(self.size_penalties))
        object.__setattr__(self, "deliveries", tuple(self.deliveries))

        has_id = self.supplier_id is not None
        has_name = bool(self.supplier_name)
        if has_id == has_name:
            raise ValueError(
                "Exactly one of supplier_id or supplier_name must be set"
            )
        if self.version < 1:
            raise ValueError(f"version must be >= 1, got {self.version}")

    @property
    def is_closed(self) -> bool:
        return self.status is ContractStatus.CLOSED

    @property
    def supplier_ref(self) -> UUID | str:
        """The single supplier reference, id or free-text name."""
        return self.supplier_id if self.supplier_id is not None else self.supplier_name

    def with_changes(self, **changes: Any) -> Self:
        """Return a copy with ``changes`` applied (validation re-runs)."""
        return replace(self, **changes)


def normalize_price_points(
    points: tuple[PricePoint, ...] | list[PricePoint],
) -> tuple[PricePoint, ...]:
    """Sort points by size and enforce non-empty, distinct sizes.

    Raises:
        EmptyPriceTableError: no points.
        DuplicateSizeError: two points share a size.
    """
    ordered = tuple(sorted(points, key=lambda p: p.size))
    if not ordered:
        raise EmptyPriceTableError()
    duplicates = sorted(
        {a.size for a, b in zip(ordered, ordered[1:]) if a.size == b.size}
    )
    if duplicates:
        raise DuplicateSizeError(tuple(duplicates))
    return ordered
