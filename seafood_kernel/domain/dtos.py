"""
Validation DTOs (``seafood_kernel.domain.dtos``).

Responsibility
--------------
Immutable carriers for validation outcomes: field-scoped errors, advisory
pricing warnings, and the result that aggregates them together with the
normalized payload.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Generic, TypeVar

from seafood_kernel.exceptions import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class FieldError:
    """
    A single validation error.

    Contract:
        Carries a machine-readable code, human-readable message, optional field
        path (e.g. ``base_pricing[1].price``), and optional details dict with
        the offending value and the expected constraint.

    Guarantees:
        - Immutable (frozen dataclass)
        - code is always present

    Non-goals:
        - Does NOT raise exceptions -- it IS the error representation.
    """

    code: str
    message: str
    field: str | None = None
    details: dict[str, Any] | None = None


@dataclass(frozen=True)
class PricingWarning:
    """
    Advisory note about a price table that is accepted as-is.

    Emitted when the price at a larger size jumps well above the price of
    the previous size.  Callers choose whether to surface it.
    """

    code: str
    message: str
    size: Decimal
    price: Decimal
    previous_size: Decimal
    previous_price: Decimal

    @property
    def ratio(self) -> Decimal:
        if self.previous_price == Decimal("0"):
            return Decimal("0")
        return self.price / self.previous_price


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    """
    Result of validation.

    Contract:
        Either Ok (``is_valid`` with a normalized ``value``) or Err (one or
        more ``errors``).  Warnings may accompany either outcome.

    Guarantees:
        - Immutable (frozen dataclass)
        - errors and warnings are always tuples (never None)
        - bool(result) == result.is_valid for convenience
    """

    is_valid: bool
    value: T | None = None
    errors: tuple[FieldError, ...] = field(default_factory=tuple)
    warnings: tuple[PricingWarning, ...] = field(default_factory=tuple)

    @classmethod
    def success(
        cls,
        value: T,
        warnings: tuple[PricingWarning, ...] = (),
    ) -> ValidationResult[T]:
        """Create a successful validation result."""
        return cls(is_valid=True, value=value, errors=(), warnings=tuple(warnings))

    @classmethod
    def failure(
        cls,
        *errors: FieldError,
        warnings: tuple[PricingWarning, ...] = (),
    ) -> ValidationResult[T]:
        """Create a failed validation result."""
        return cls(is_valid=False, value=None, errors=tuple(errors), warnings=tuple(warnings))

    def __bool__(self) -> bool:
        return self.is_valid

    @property
    def error_codes(self) -> tuple[str, ...]:
        return tuple(e.code for e in self.errors)

    def errors_for(self, field_name: str) -> tuple[FieldError, ...]:
        """Errors whose field path equals or starts with ``field_name``."""
        return tuple(
            e for e in self.errors
            if e.field is not None
            and (e.field == field_name or e.field.startswith((f"{field_name}.", f"{field_name}[")))
        )

    def unwrap(self) -> T:
        """Return the normalized value or raise ValidationError with all errors."""
        if not self.is_valid:
            raise ValidationError(self.errors)
        return self.value  # type: ignore[return-value]
