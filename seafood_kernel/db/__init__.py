"""Declarative SQLAlchemy base for the persisted contract shape."""

from seafood_kernel.db.base import Base, TrackedBase, UUIDString

__all__ = ["Base", "TrackedBase", "UUIDString"]
