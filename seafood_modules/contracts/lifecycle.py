"""
Contract Lifecycle (``seafood_modules.contracts.lifecycle``).

Responsibility
--------------
Decides which status changes and field edits a contract accepts, and
produces the next contract value when they are accepted.

Architecture position
---------------------
**Modules layer** -- pure, ZERO I/O.  The state machine is declared as
data (``CONTRACT_LIFECYCLE_WORKFLOW``); ``ContractLifecycle`` evaluates it.

Invariants enforced
-------------------
* Open -> Closed is the only transition; Closed is terminal.
* Pricing fields (``base_pricing``, ``size_penalties``) and delivery
  fields (``deliveries``) are frozen once Closed.
* Administrative fields (``contract_type``, ``supplier_name``,
  ``supplier_id``) stay editable while Closed.
* Every accepted edit or transition returns a new contract with
  ``version + 1``; a deliveries edit also sets ``supplier_filled``.

Failure modes
-------------
* ``InvalidTransitionError`` -- transition not declared in the workflow.
* ``ContractClosedError`` -- pricing/delivery edit on a Closed contract.
* ``UnknownFieldError`` -- field missing or not editable (``status``, ``id``).
* ``ValueError`` -- the edited value breaks a Contract invariant.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from seafood_kernel.domain.values import (
    Contract,
    ContractStatus,
    ContractType,
    Delivery,
    PenaltyRule,
    PricePoint,
)
from seafood_kernel.domain.workflow import Guard, Transition, Workflow
from seafood_kernel.exceptions import (
    ContractClosedError,
    InvalidTransitionError,
    UnknownFieldError,
)
from seafood_kernel.logging_config import get_logger

logger = get_logger("modules.contracts.lifecycle")


SUPPLIER_FILLED = Guard(
    "supplier_filled",
    "Supplier has submitted deliveries (advisory; closing without them is logged)",
)

CONTRACT_LIFECYCLE_WORKFLOW = Workflow(
    name="contract_lifecycle",
    description="Seafood purchase contract from negotiation to close",
    initial_state=ContractStatus.OPEN.value,
    states=(ContractStatus.OPEN.value, ContractStatus.CLOSED.value),
    transitions=(
        Transition(
            ContractStatus.OPEN.value,
            ContractStatus.CLOSED.value,
            action="close",
            guard=SUPPLIER_FILLED,
        ),
    ),
    terminal_states=(ContractStatus.CLOSED.value,),
)

PRICING_FIELDS = ("base_pricing", "size_penalties")
DELIVERY_FIELDS = ("deliveries",)
ADMIN_FIELDS = ("contract_type", "supplier_name", "supplier_id")
EDITABLE_FIELDS = PRICING_FIELDS + DELIVERY_FIELDS + ADMIN_FIELDS

_FROZEN_WHEN_CLOSED = frozenset(PRICING_FIELDS + DELIVERY_FIELDS)


def _coerce(field: str, value: Any) -> Any:
    """Turn document-shaped values into the Contract's value types."""
    if field == "base_pricing":
        return tuple(v if isinstance(v, PricePoint) else PricePoint.from_dict(v) for v in value)
    if field == "size_penalties":
        return tuple(v if isinstance(v, PenaltyRule) else PenaltyRule.from_dict(v) for v in value)
    if field == "deliveries":
        return tuple(v if isinstance(v, Delivery) else Delivery.from_dict(v) for v in value)
    if field == "contract_type":
        return ContractType(value)
    if field == "supplier_id" and value is not None and not isinstance(value, UUID):
        return UUID(str(value))
    return value


class ContractLifecycle:
    """
    Evaluates CONTRACT_LIFECYCLE_WORKFLOW against contract values.

    Contract:
        Stateless; inputs are never modified.
    Non-goals:
        - Does not check who is allowed to make the change.
        - Does not merge concurrent edits; ``version`` is the caller's
          optimistic-concurrency token.
    """

    def __init__(self, workflow: Workflow = CONTRACT_LIFECYCLE_WORKFLOW):
        self._workflow = workflow

    @property
    def workflow(self) -> Workflow:
        return self._workflow

    def transition(self, contract: Contract, to_status: ContractStatus | str) -> Contract:
        """Move ``contract`` to ``to_status`` if the workflow declares it."""
        target = ContractStatus(to_status)
        found = self._workflow.find_transition(contract.status.value, target.value)
        if found is None:
            logger.warning("contract_transition_rejected", extra={
                "contract_id": contract.id,
                "from_status": contract.status.value,
                "to_status": target.value,
            })
            raise InvalidTransitionError(contract.id, contract.status.value, target.value)

        if found.guard is SUPPLIER_FILLED and not contract.supplier_filled:
            logger.warning("contract_closed_without_supplier_input", extra={
                "contract_id": contract.id,
            })

        updated = contract.with_changes(status=target, version=contract.version + 1)
        logger.info("contract_transitioned", extra={
            "contract_id": contract.id,
            "action": found.action,
            "from_status": contract.status.value,
            "to_status": target.value,
            "version": updated.version,
        })
        return updated

    def close(self, contract: Contract) -> Contract:
        """Open -> Closed.  Raises InvalidTransitionError when already Closed."""
        return self.transition(contract, ContractStatus.CLOSED)

    def can_edit(self, contract: Contract, field: str) -> bool:
        if field not in EDITABLE_FIELDS:
            return False
        return not (contract.is_closed and field in _FROZEN_WHEN_CLOSED)

    def apply_edit(self, contract: Contract, field: str, value: Any) -> Contract:
        """
        Replace ``field`` with ``value`` and bump the version.

        Raises:
            UnknownFieldError: field is not in EDITABLE_FIELDS.
            ContractClosedError: pricing/delivery field on a Closed contract.
        """
        return self.apply_edits(contract, {field: value})

    def apply_edits(self, contract: Contract, edits: Mapping[str, Any]) -> Contract:
        """Apply several field edits as one accepted change (one version bump).

        Every field is checked before anything is applied, so a rejected
        field leaves the whole request unapplied.
        """
        if not edits:
            raise ValueError("No fields to edit")
        for field in edits:
            if field not in EDITABLE_FIELDS:
                raise UnknownFieldError(field, EDITABLE_FIELDS)
            if contract.is_closed and field in _FROZEN_WHEN_CLOSED:
                logger.warning("contract_edit_rejected_closed", extra={
                    "contract_id": contract.id,
                    "field": field,
                })
                raise ContractClosedError(contract.id, field)

        changes: dict[str, Any] = {f: _coerce(f, v) for f, v in edits.items()}
        changes["version"] = contract.version + 1
        if "deliveries" in edits:
            changes["supplier_filled"] = True
        # Switching the supplier reference clears the other one
        if edits.get("supplier_id") is not None and "supplier_name" not in edits:
            changes["supplier_name"] = None
        if edits.get("supplier_name") is not None and "supplier_id" not in edits:
            changes["supplier_id"] = None

        updated = contract.with_changes(**changes)
        logger.info("contract_edited", extra={
            "contract_id": contract.id,
            "fields": sorted(edits),
            "version": updated.version,
        })
        return updated
