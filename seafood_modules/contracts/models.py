"""
Contract Module Models (``seafood_modules.contracts.models``).

Responsibility
--------------
Frozen dataclass value objects for the request and response shapes of the
contracts module: validated drafts and updates, list queries, write
outcomes and the transfer snapshot handed to downstream processing.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Produced by the
validator, consumed by ``ContractsService`` and returned to callers.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All quantities and prices are ``Decimal`` -- NEVER ``float``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from seafood_kernel.domain.dtos import PricingWarning
from seafood_kernel.domain.values import (
    Contract,
    ContractStatus,
    ContractType,
    Delivery,
    PenaltyRule,
    PricePoint,
)


@dataclass(frozen=True)
class ContractDraft:
    """A validated, normalized create-contract payload."""
    contract_type: ContractType
    base_pricing: tuple[PricePoint, ...]
    size_penalties: tuple[PenaltyRule, ...] = ()
    supplier_id: UUID | None = None
    supplier_name: str | None = None
    status: ContractStatus = ContractStatus.OPEN
    contract_id: str | None = None

    def to_contract(self, contract_id: str, created_by: UUID | None = None) -> Contract:
        return Contract(
            id=self.contract_id or contract_id,
            contract_type=self.contract_type,
            base_pricing=self.base_pricing,
            supplier_id=self.supplier_id,
            supplier_name=self.supplier_name,
            size_penalties=self.size_penalties,
            status=self.status,
            created_by=created_by,
        )


@dataclass(frozen=True)
class PricingUpdate:
    """GM edit of the price table and/or penalty rules."""
    base_pricing: tuple[PricePoint, ...] | None = None
    size_penalties: tuple[PenaltyRule, ...] | None = None


@dataclass(frozen=True)
class DeliveriesUpdate:
    """Supplier submission of deliveries, optionally changing the type."""
    deliveries: tuple[Delivery, ...]
    contract_type: ContractType | None = None


@dataclass(frozen=True)
class StatusUpdate:
    status: ContractStatus


@dataclass(frozen=True)
class ListQuery:
    """Normalized contract list parameters."""
    status: ContractStatus | None = None
    page: int = 1
    limit: int = 20
    order_by: str = "created_at"
    order: str = "DESC"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class ContractOutcome:
    """Result of an accepted write: the new contract plus advisory warnings."""
    contract: Contract
    warnings: tuple[PricingWarning, ...] = field(default_factory=tuple)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


class TransferStatus(str, Enum):
    """Processing state of a transferred contract snapshot."""
    TRANSFERRED = "Transferred"
    PROCESSED = "Processed"
    ARCHIVED = "Archived"


@dataclass(frozen=True)
class ContractTransfer:
    """Snapshot of a Closed contract handed over for processing."""
    contract_id: str
    supplier_name: str | None
    supplier_id: UUID | None
    transferred_by: UUID | None
    transfer_date: datetime
    bongkar: tuple[str, ...]  # unloading (delivery) dates
    size_ranges: tuple[str, ...]
    tons: tuple[Decimal, ...]
    dynamic_pricing: tuple[PricePoint, ...]
    size_penalties: tuple[PenaltyRule, ...]
    status: TransferStatus = TransferStatus.TRANSFERRED
    notes: str | None = None

    @property
    def total_tons(self) -> Decimal:
        return sum(self.tons, Decimal("0"))

    def to_dict(self) -> dict:
        return {
            "contract_id": self.contract_id,
            "supplier_name": self.supplier_name,
            "supplier_id": str(self.supplier_id) if self.supplier_id else None,
            "transferred_by": str(self.transferred_by) if self.transferred_by else None,
            "transfer_date": self.transfer_date.isoformat(),
            "bongkar": list(self.bongkar),
            "size_ranges": list(self.size_ranges),
            "tons": [str(t) for t in self.tons],
            "dynamic_pricing": [p.to_dict() for p in self.dynamic_pricing],
            "size_penalties": [r.to_dict() for r in self.size_penalties],
            "status": self.status.value,
            "notes": self.notes,
        }
