"""
Contracts Module Service (``seafood_modules.contracts.service``).

Responsibility
--------------
Orchestrates the contract flow -- validate a request, check the lifecycle,
produce the next contract value, answer price queries, build transfer
snapshots -- by delegating to the validator, ``ContractLifecycle`` and the
pure engines in ``seafood_engines``.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``ContractsService`` is the public entry
point for contract operations.  It holds no contract state and never
persists; callers load and store contracts themselves.

Invariants enforced
-------------------
* Every write validates its payload first; invalid payloads raise
  ``ValidationError`` carrying all field errors.
* Every accepted write returns ``ContractOutcome(contract, warnings)``.
* Status requests other than Open -> Closed raise
  ``InvalidTransitionError``.
* Time and randomness come from the injected ``Clock`` and ``Random``.

Failure modes
-------------
* ``ValidationError`` -- malformed payload.
* ``LifecycleError`` subclasses -- edit or transition not allowed.
* ``PricingError`` / ``PenaltyError`` subclasses from quotes.

Audit relevance
---------------
Structured log events at the start and end of every write carry the
contract id, version and actor; ``LogContext`` is bound for the duration
of the call so engine traces share the same context.

Usage::

    service = ContractsService(get_active_settings(), clock=SystemClock())
    outcome = service.create_contract(payload, created_by=actor_id)
    quote = service.quote(outcome.contract, size=Decimal("25"), quantity=Decimal("2"))
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any
from uuid import UUID

from seafood_config.schema import ContractSettings
from seafood_engines.penalties import SizeRangeClassifier, WeightFactor
from seafood_engines.price_table import OutOfRangePolicy
from seafood_engines.pricing import PricingResolver, Quote, ScheduleLine
from seafood_kernel.domain.clock import Clock, SystemClock
from seafood_kernel.domain.values import Contract, ContractStatus
from seafood_kernel.exceptions import InvalidTransitionError
from seafood_kernel.logging_config import LogContext, get_logger
from seafood_modules.contracts.lifecycle import ContractLifecycle
from seafood_modules.contracts.models import ContractOutcome, ContractTransfer
from seafood_modules.contracts.ranges import band_label_classifier
from seafood_modules.contracts.transfer import build_transfer
from seafood_modules.contracts.validator import (
    generate_contract_id,
    validate_contract_payload,
    validate_deliveries_update,
    validate_pricing_update,
    validate_status_update,
)

logger = get_logger("modules.contracts.service")


class ContractsService:
    """
    Orchestrates contract operations through the validator, lifecycle and engines.

    Contract
    --------
    * Writes take the current contract value and return a new one; the
      input contract is never modified.
    * Reads (``quote``, ``price_schedule``) are pure.

    Non-goals
    ---------
    * Does NOT decide who may edit a contract.
    * Does NOT persist contracts (see ``ContractModel`` for the mapping).
    * Does NOT merge concurrent edits; compare ``Contract.version``.
    """

    def __init__(
        self,
        settings: ContractSettings | None = None,
        clock: Clock | None = None,
        classifier: SizeRangeClassifier = band_label_classifier,
        weight_factor: WeightFactor | None = None,
        rng: random.Random | None = None,
    ):
        self._settings = settings or ContractSettings()
        self._clock = clock or SystemClock()
        self._rng = rng or random.Random()
        self._lifecycle = ContractLifecycle()
        self._resolver = PricingResolver(
            classifier=classifier,
            weight_factor=weight_factor,
            price_quantum=self._settings.pricing.price_quantum,
        )
        self._policy = OutOfRangePolicy(self._settings.pricing.out_of_range_policy)

    @property
    def settings(self) -> ContractSettings:
        return self._settings

    @property
    def lifecycle(self) -> ContractLifecycle:
        return self._lifecycle

    @property
    def resolver(self) -> PricingResolver:
        return self._resolver

    # =========================================================================
    # Writes
    # =========================================================================

    def create_contract(
        self, payload: Mapping[str, Any], created_by: UUID | None = None,
    ) -> ContractOutcome:
        """Validate a create payload and build a new Open (or requested) contract."""
        result = validate_contract_payload(payload, self._settings)
        draft = result.unwrap()
        contract_id = draft.contract_id or generate_contract_id(self._clock, self._rng)
        contract = draft.to_contract(contract_id, created_by=created_by)

        logger.info("contract_created", extra={
            "contract_id": contract.id,
            "contract_type": contract.contract_type.value,
            "status": contract.status.value,
            "price_point_count": len(contract.base_pricing),
            "penalty_count": len(contract.size_penalties),
            "warning_count": len(result.warnings),
        })
        return ContractOutcome(contract=contract, warnings=result.warnings)

    def update_pricing(
        self, contract: Contract, payload: Mapping[str, Any],
    ) -> ContractOutcome:
        """GM edit of base pricing and/or size penalties; Open contracts only."""
        with LogContext.bind(contract_id=contract.id):
            update = validate_pricing_update(payload, self._settings)
            change = update.unwrap()

            edits: dict[str, Any] = {}
            if change.base_pricing is not None:
                edits["base_pricing"] = change.base_pricing
            if change.size_penalties is not None:
                edits["size_penalties"] = change.size_penalties
            updated = self._lifecycle.apply_edits(contract, edits)

            logger.info("contract_pricing_updated", extra={
                "contract_id": contract.id,
                "version": updated.version,
                "warning_count": len(update.warnings),
            })
            return ContractOutcome(contract=updated, warnings=update.warnings)

    def update_deliveries(
        self, contract: Contract, payload: Mapping[str, Any],
    ) -> ContractOutcome:
        """Supplier submission of deliveries, optionally changing the contract type."""
        with LogContext.bind(contract_id=contract.id):
            change = validate_deliveries_update(payload, self._settings).unwrap()

            edits: dict[str, Any] = {"deliveries": change.deliveries}
            if change.contract_type is not None:
                edits["contract_type"] = change.contract_type
            updated = self._lifecycle.apply_edits(contract, edits)

            logger.info("contract_deliveries_updated", extra={
                "contract_id": contract.id,
                "version": updated.version,
                "delivery_count": len(updated.deliveries),
            })
            return ContractOutcome(contract=updated)

    def update_status(
        self, contract: Contract, payload: Mapping[str, Any],
    ) -> ContractOutcome:
        """Apply a ``{status}`` request.  Only Open -> Closed is accepted."""
        with LogContext.bind(contract_id=contract.id):
            target = validate_status_update(payload).unwrap().status
            # Reopening is not supported; Closed -> Closed is rejected by the lifecycle
            if target is not ContractStatus.CLOSED:
                raise InvalidTransitionError(contract.id, contract.status.value, target.value)

            updated = self._lifecycle.close(contract)
            return ContractOutcome(contract=updated)

    # =========================================================================
    # Reads
    # =========================================================================

    def quote(self, contract: Contract, size: Any, quantity: Any) -> Quote:
        """Penalized unit and total price; out-of-range sizes raise OutOfRangeError."""
        with LogContext.bind(contract_id=contract.id):
            return self._resolver.quote(contract, size, quantity)

    def price_schedule(
        self, contract: Contract, sizes: Iterable[Any],
    ) -> tuple[ScheduleLine, ...]:
        """Unit prices for several sizes using the configured out-of-range policy."""
        with LogContext.bind(contract_id=contract.id):
            return self._resolver.price_schedule(contract, sizes, self._policy)

    def transfer(
        self,
        contract: Contract,
        transferred_by: UUID | None,
        notes: str | None = None,
    ) -> ContractTransfer:
        """Snapshot a Closed contract for downstream processing."""
        with LogContext.bind(contract_id=contract.id):
            return build_transfer(contract, transferred_by, self._clock, notes=notes)
