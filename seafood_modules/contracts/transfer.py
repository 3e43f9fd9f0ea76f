"""Snapshot of a Closed contract for downstream processing.

Deliveries are flattened into parallel lists (unloading dates, size
ranges, tonnage) and the price table and penalties are copied as they
stood at close.
"""

from __future__ import annotations

from uuid import UUID

from seafood_kernel.domain.clock import Clock
from seafood_kernel.domain.values import Contract
from seafood_kernel.exceptions import ContractNotClosedError
from seafood_kernel.logging_config import get_logger
from seafood_modules.contracts.models import ContractTransfer, TransferStatus

logger = get_logger("modules.contracts.transfer")


def build_transfer(
    contract: Contract,
    transferred_by: UUID | None,
    clock: Clock,
    notes: str | None = None,
) -> ContractTransfer:
    """Build the transfer snapshot; only Closed contracts can be transferred."""
    if not contract.is_closed:
        raise ContractNotClosedError(contract.id, contract.status.value)

    transfer = ContractTransfer(
        contract_id=contract.id,
        supplier_name=contract.supplier_name,
        supplier_id=contract.supplier_id,
        transferred_by=transferred_by,
        transfer_date=clock.now_utc(),
        bongkar=tuple(d.date for d in contract.deliveries),
        size_ranges=tuple(d.size_range for d in contract.deliveries),
        tons=tuple(d.quantity_tons for d in contract.deliveries),
        dynamic_pricing=contract.base_pricing,
        size_penalties=contract.size_penalties,
        status=TransferStatus.TRANSFERRED,
        notes=notes,
    )
    logger.info("contract_transfer_built", extra={
        "contract_id": contract.id,
        "delivery_count": len(contract.deliveries),
        "total_tons": str(transfer.total_tons),
    })
    return transfer
