"""
Contracts Module (``seafood_modules.contracts``).

Responsibility
--------------
Seafood purchase contracts between the General Manager and suppliers:
payload validation, the Open/Closed lifecycle, price quotes through the
engines, the persisted ORM shape and the transfer snapshot taken after
close.

Architecture position
---------------------
**Modules layer** -- validators, workflow declaration, ORM mapping and a
service facade that delegates pricing to ``seafood_engines``.

Invariants enforced
-------------------
* Closed contracts keep their pricing and deliveries frozen.
* Every accepted edit increments ``Contract.version``.
* Validation reports every field error in one pass.
"""

from seafood_modules.contracts.lifecycle import (
    CONTRACT_LIFECYCLE_WORKFLOW,
    EDITABLE_FIELDS,
    ContractLifecycle,
)
from seafood_modules.contracts.models import (
    ContractDraft,
    ContractOutcome,
    ContractTransfer,
    DeliveriesUpdate,
    ListQuery,
    PricingUpdate,
    StatusUpdate,
    TransferStatus,
)
from seafood_modules.contracts.ranges import band_label_classifier, parse_band_label
from seafood_modules.contracts.service import ContractsService
from seafood_modules.contracts.transfer import build_transfer
from seafood_modules.contracts.validator import (
    generate_contract_id,
    validate_contract_id,
    validate_contract_payload,
    validate_deliveries_update,
    validate_list_query,
    validate_pricing_update,
    validate_status_update,
)

__all__ = [
    "CONTRACT_LIFECYCLE_WORKFLOW",
    "EDITABLE_FIELDS",
    "ContractDraft",
    "ContractLifecycle",
    "ContractOutcome",
    "ContractTransfer",
    "ContractsService",
    "DeliveriesUpdate",
    "ListQuery",
    "PricingUpdate",
    "StatusUpdate",
    "TransferStatus",
    "band_label_classifier",
    "build_transfer",
    "generate_contract_id",
    "parse_band_label",
    "validate_contract_id",
    "validate_contract_payload",
    "validate_deliveries_update",
    "validate_list_query",
    "validate_pricing_update",
    "validate_status_update",
]
