"""
Pure domain layer.

This module contains pure value objects and validation DTOs
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

All domain objects are immutable and deterministic.
"""

from seafood_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from seafood_kernel.domain.dtos import FieldError, PricingWarning, ValidationResult
from seafood_kernel.domain.values import (
    CONTRACT_ID_PATTERN,
    Contract,
    ContractStatus,
    ContractType,
    Delivery,
    DeliveryUnit,
    PenaltyRule,
    PenaltyUnit,
    PricePoint,
    normalize_price_points,
    to_decimal,
)
from seafood_kernel.domain.workflow import Guard, Transition, Workflow

__all__ = [
    # Clock
    "Clock",
    "DeterministicClock",
    "SystemClock",
    # DTOs
    "FieldError",
    "PricingWarning",
    "ValidationResult",
    # Values
    "CONTRACT_ID_PATTERN",
    "Contract",
    "ContractStatus",
    "ContractType",
    "Delivery",
    "DeliveryUnit",
    "PenaltyRule",
    "PenaltyUnit",
    "PricePoint",
    "normalize_price_points",
    "to_decimal",
    # Workflow
    "Guard",
    "Transition",
    "Workflow",
]
