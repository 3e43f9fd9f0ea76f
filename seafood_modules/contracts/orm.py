"""
SQLAlchemy ORM mapping for the persisted contract shape.

Responsibility
--------------
Describe how a ``Contract`` value is stored: fixed columns for identity,
status and supplier, JSON document columns for the price table, penalty
rules and deliveries.  The engine never opens sessions; callers own the
store and use ``from_dto`` / ``apply_contract`` / ``to_dto`` to cross the
boundary.

Architecture position
---------------------
**Modules layer** -- ORM models.  Inherits from ``TrackedBase`` (kernel db
layer).

Invariants enforced
-------------------
* Exactly one of ``supplier_id`` / ``supplier_name`` is NOT NULL
  (``ck_contract_single_supplier``).
* ``version`` is SQLAlchemy's ``version_id_col`` with application-supplied
  values: an UPDATE only succeeds when the row still holds the version the
  edit was based on, otherwise ``StaleDataError`` is raised.
* Decimals inside JSON documents are stored as strings, never floats.
"""

from uuid import UUID

from sqlalchemy import JSON, Boolean, CheckConstraint, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from seafood_kernel.db.base import TrackedBase
from seafood_kernel.domain.values import (
    Contract,
    Delivery,
    PenaltyRule,
    PricePoint,
)


class ContractModel(TrackedBase):
    """
    A seafood purchase contract row.

    Guarantees:
        - ``unique_id`` (``L########.###.00``) is unique.
        - ``to_dto()`` returns a validated ``Contract`` value.
    """

    __tablename__ = "contracts"

    __table_args__ = (
        CheckConstraint(
            "(supplier_id IS NULL) <> (supplier_name IS NULL)",
            name="ck_contract_single_supplier",
        ),
        CheckConstraint("status IN ('Open', 'Closed')", name="ck_contract_status"),
        Index("idx_contract_unique_id", "unique_id", unique=True),
        Index("idx_contract_status", "status"),
        Index("idx_contract_supplier_id", "supplier_id"),
    )

    unique_id: Mapped[str] = mapped_column(String(20), nullable=False)
    contract_type: Mapped[str] = mapped_column(String(20), nullable=False)
    supplier_id: Mapped[UUID | None] = mapped_column(nullable=True)
    supplier_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Open")
    supplier_filled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    base_pricing: Mapped[list] = mapped_column(JSON, nullable=False)
    size_penalties: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    deliveries: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    version: Mapped[int] = mapped_column(nullable=False, default=1)

    __mapper_args__ = {
        "version_id_col": version,
        "version_id_generator": False,
    }

    def to_dto(self) -> Contract:
        return Contract(
            id=self.unique_id,
            contract_type=self.contract_type,
            base_pricing=tuple(PricePoint.from_dict(d) for d in self.base_pricing),
            supplier_id=self.supplier_id,
            supplier_name=self.supplier_name,
            size_penalties=tuple(PenaltyRule.from_dict(d) for d in self.size_penalties),
            status=self.status,
            deliveries=tuple(Delivery.from_dict(d) for d in self.deliveries),
            supplier_filled=self.supplier_filled,
            version=self.version,
            created_by=self.created_by_id,
        )

    @classmethod
    def from_dto(cls, contract: Contract, created_by_id: UUID | None = None) -> "ContractModel":
        actor = created_by_id or contract.created_by
        if actor is None:
            raise ValueError(
                f"Contract {contract.id} has no creator; pass created_by_id"
            )
        model = cls(unique_id=contract.id, created_by_id=actor)
        model._copy_from(contract)
        return model

    def apply_contract(self, contract: Contract, updated_by_id: UUID | None = None) -> None:
        """Copy an edited contract value onto this row.

        The edited value must carry the next version (as produced by
        ``ContractLifecycle``) for the flush to pass the version check.
        """
        if contract.id != self.unique_id:
            raise ValueError(
                f"Cannot apply contract {contract.id} to row {self.unique_id}"
            )
        self._copy_from(contract)
        self.updated_by_id = updated_by_id

    def _copy_from(self, contract: Contract) -> None:
        self.contract_type = contract.contract_type.value
        self.supplier_id = contract.supplier_id
        self.supplier_name = contract.supplier_name
        self.status = contract.status.value
        self.supplier_filled = contract.supplier_filled
        self.base_pricing = [p.to_dict() for p in contract.base_pricing]
        self.size_penalties = [r.to_dict() for r in contract.size_penalties]
        self.deliveries = [d.to_dict() for d in contract.deliveries]
        self.version = contract.version

    def __repr__(self) -> str:
        return f"<ContractModel {self.unique_id}: {self.status} v{self.version}>"
