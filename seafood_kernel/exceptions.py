"""
Typed Exception Hierarchy for the Contract Pricing Engine.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Negotiated prices are business-critical. A caller that receives a generic
ValueError has to parse the message to decide whether to clamp a size,
re-submit a payload or tell the user the contract is closed. Every error
raised by the engine therefore:
  1. Has its own class (catch by type, not by message)
  2. Has a CODE attribute (machine-readable, API-safe)
  3. Carries structured DATA (field, offending value, expected constraint)

Example:
    try:
        quote = resolver.quote(contract, size=Decimal("45"), quantity=Decimal("2"))
    except OutOfRangeError as e:
        # Caller chooses the fallback policy
        price = table.resolve_price(e.nearest_bound)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ContractEngineError (base)
    |
    +-- ValidationError
    |
    +-- PricingError
    |   +-- OutOfRangeError
    |   +-- DuplicateSizeError
    |   +-- PricePointNotFoundError
    |   +-- EmptyPriceTableError
    |   +-- InvalidQuantityError
    |
    +-- PenaltyError
    |   +-- UnsupportedUnitError
    |   +-- ConversionFactorRequiredError
    |
    +-- LifecycleError
        +-- InvalidTransitionError
        +-- ContractClosedError
        +-- UnknownFieldError
        +-- ContractNotClosedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                        | When Raised
-----------|-----------------------------|-----------------------------------------
Validation | VALIDATION_FAILED           | Payload has one or more field errors
-----------|-----------------------------|-----------------------------------------
Pricing    | SIZE_OUT_OF_RANGE           | Size below/above the defined price points
           | DUPLICATE_SIZE              | Two price points share a size
           | PRICE_POINT_NOT_FOUND       | Removing a size that is not in the table
           | EMPTY_PRICE_TABLE           | Table would have zero price points
           | INVALID_QUANTITY            | Quote quantity is zero or negative
-----------|-----------------------------|-----------------------------------------
Penalty    | UNSUPPORTED_UNIT            | Penalty/delivery unit not recognized
           | CONVERSION_FACTOR_REQUIRED  | Rp/kg rule matched without a weight factor
-----------|-----------------------------|-----------------------------------------
Lifecycle  | INVALID_TRANSITION          | Status change not allowed from this state
           | CONTRACT_CLOSED             | Pricing/delivery edit on a Closed contract
           | UNKNOWN_FIELD               | Field is not editable through apply_edit
           | CONTRACT_NOT_CLOSED         | Transfer requested for an Open contract

===============================================================================
HANDLING PATTERNS
===============================================================================

1. ValidationError is recoverable: render every entry of ``e.errors`` next
   to its field and let the user re-submit.
2. OutOfRangeError is recoverable: the caller decides between clamping to
   ``e.nearest_bound`` and rejecting the request.
3. UnsupportedUnitError is not recoverable without correcting the payload.
4. InvalidTransitionError / ContractClosedError must be surfaced as
   "contract is closed", never ignored.

None of these are logged-and-swallowed inside the engine.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from seafood_kernel.domain.dtos import FieldError


class ContractEngineError(Exception):
    """
    Base exception for all contract engine errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "CONTRACT_ENGINE_ERROR"


# Validation


class ValidationError(ContractEngineError):
    """A payload failed validation; carries every field error at once."""

    code: str = "VALIDATION_FAILED"

    def __init__(self, errors: tuple[FieldError, ...] | list[FieldError]):
        self.errors = tuple(errors)
        fields = sorted({e.field for e in self.errors if e.field})
        super().__init__(
            f"Validation failed with {len(self.errors)} error(s)"
            + (f" on: {', '.join(fields)}" if fields else "")
        )

    @property
    def error_codes(self) -> tuple[str, ...]:
        return tuple(e.code for e in self.errors)


# Pricing


class PricingError(ContractEngineError):
    """Base exception for price table and quote errors."""

    code: str = "PRICING_ERROR"


class OutOfRangeError(PricingError):
    """Requested size lies outside the defined price points.

    The engine never extrapolates. ``nearest_bound`` and ``nearest_price``
    let the caller apply its own clamp/reject policy.
    """

    code: str = "SIZE_OUT_OF_RANGE"

    def __init__(
        self,
        size: Decimal,
        nearest_bound: Decimal,
        nearest_price: Decimal,
        min_size: Decimal,
        max_size: Decimal,
    ):
        self.size = size
        self.nearest_bound = nearest_bound
        self.nearest_price = nearest_price
        self.min_size = min_size
        self.max_size = max_size
        super().__init__(
            f"Size {size} is outside the priced range [{min_size}, {max_size}]; "
            f"nearest bound is {nearest_bound}"
        )


class DuplicateSizeError(PricingError):
    """Two price points share the same size."""

    code: str = "DUPLICATE_SIZE"

    def __init__(self, sizes: tuple[Decimal, ...]):
        self.sizes = sizes
        super().__init__(
            f"Duplicate sizes in price table: {', '.join(str(s) for s in sizes)}"
        )


class PricePointNotFoundError(PricingError):
    """No price point exists for the given size."""

    code: str = "PRICE_POINT_NOT_FOUND"

    def __init__(self, size: Decimal):
        self.size = size
        super().__init__(f"No price point for size {size}")


class EmptyPriceTableError(PricingError):
    """A price table must always hold at least one price point."""

    code: str = "EMPTY_PRICE_TABLE"

    def __init__(self, message: str = "Price table requires at least one price point"):
        super().__init__(message)


class InvalidQuantityError(PricingError):
    """Quote quantity must be strictly positive."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, quantity: Any):
        self.quantity = quantity
        super().__init__(f"Quantity must be greater than zero, got {quantity}")


# Penalties and units


class PenaltyError(ContractEngineError):
    """Base exception for penalty rule errors."""

    code: str = "PENALTY_ERROR"


class UnsupportedUnitError(PenaltyError):
    """A unit string is not one of the recognized units."""

    code: str = "UNSUPPORTED_UNIT"

    def __init__(self, unit: Any, allowed: tuple[str, ...], kind: str = "penalty"):
        self.unit = unit
        self.allowed = allowed
        self.kind = kind
        super().__init__(
            f"Unsupported {kind} unit {unit!r}; expected one of: {', '.join(allowed)}"
        )


class ConversionFactorRequiredError(PenaltyError):
    """An Rp/kg rule matched but no size-to-weight factor was supplied."""

    code: str = "CONVERSION_FACTOR_REQUIRED"

    def __init__(self, size: Decimal, range_label: str):
        self.size = size
        self.range_label = range_label
        super().__init__(
            f"Penalty rule '{range_label}' is priced per kg; a size-to-weight "
            f"conversion factor is required to apply it at size {size}"
        )


# Lifecycle


class LifecycleError(ContractEngineError):
    """Base exception for contract lifecycle violations."""

    code: str = "LIFECYCLE_ERROR"


class InvalidTransitionError(LifecycleError):
    """The requested status change is not allowed from the current status."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, contract_id: str, from_status: str, to_status: str):
        self.contract_id = contract_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid status transition for contract {contract_id}: "
            f"{from_status} -> {to_status}"
        )


class ContractClosedError(LifecycleError):
    """Pricing and delivery data of a Closed contract are frozen."""

    code: str = "CONTRACT_CLOSED"

    def __init__(self, contract_id: str, field: str):
        self.contract_id = contract_id
        self.field = field
        super().__init__(
            f"Contract {contract_id} is closed; '{field}' can no longer be edited"
        )


class UnknownFieldError(LifecycleError):
    """The field does not exist or is not editable through apply_edit."""

    code: str = "UNKNOWN_FIELD"

    def __init__(self, field: str, editable: tuple[str, ...]):
        self.field = field
        self.editable = editable
        super().__init__(
            f"Field '{field}' is not editable; editable fields: {', '.join(editable)}"
        )


class ContractNotClosedError(LifecycleError):
    """Operation requires a Closed contract."""

    code: str = "CONTRACT_NOT_CLOSED"

    def __init__(self, contract_id: str, status: str):
        self.contract_id = contract_id
        self.status = status
        super().__init__(
            f"Contract {contract_id} must be Closed, current status is {status}"
        )
