"""
seafood_engines.price_table -- Sparse size-indexed price table with interpolation.

Responsibility:
    Hold a contract's base price points (size -> price) and resolve the
    base price for any size inside the defined range: exact match, or
    linear interpolation between the two bracketing points.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import seafood_kernel (exceptions, domain values, logging).
    Consumed by the pricing resolver and the contracts service.

Invariants enforced:
    - At least one price point; sizes pairwise distinct; points kept sorted.
    - Exact sizes return the stored price unchanged (no arithmetic drift).
    - Interpolated prices lie between the two bounding prices.
    - No extrapolation: sizes outside [min_size, max_size] raise
      OutOfRangeError carrying the nearest bound.
    - Determinism: arithmetic runs in a fixed Decimal context, independent
      of the caller's thread-local context.

Failure modes:
    - OutOfRangeError from ``resolve`` / ``resolve_price``.
    - DuplicateSizeError / EmptyPriceTableError at construction.
    - PricePointNotFoundError / EmptyPriceTableError from ``remove_point``.

Usage:
    table = PriceTable.from_pairs([(20, 150000), (30, 120000)])
    table.resolve_price(Decimal("25"))       # Decimal("135000")
    table = table.upsert_point(Decimal("40"), Decimal("100000"))
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Context, Decimal, localcontext
from enum import Enum
from typing import Any, Self

from seafood_kernel.domain.values import PricePoint, normalize_price_points, to_decimal
from seafood_kernel.exceptions import (
    EmptyPriceTableError,
    OutOfRangeError,
    PricePointNotFoundError,
)
from seafood_kernel.logging_config import get_logger
from seafood_engines.tracer import traced_engine

logger = get_logger("engines.price_table")

_ARITHMETIC = Context(prec=28, rounding=ROUND_HALF_EVEN)


class ResolutionMethod(str, Enum):
    """How a base price was obtained."""

    EXACT_MATCH = "exact_match"
    INTERPOLATION = "interpolation"
    CLAMPED = "clamped"


class OutOfRangePolicy(str, Enum):
    """Caller-chosen fallback for sizes outside the priced range."""

    REJECT = "reject"
    CLAMP = "clamp"


@dataclass(frozen=True)
class PriceResolution:
    """Result of resolving a size against a price table."""

    size: Decimal
    price: Decimal
    method: ResolutionMethod
    lower: PricePoint | None = None
    upper: PricePoint | None = None

    @property
    def is_interpolated(self) -> bool:
        return self.method is ResolutionMethod.INTERPOLATION


@dataclass(frozen=True)
class PriceTable:
    """
    Immutable sorted collection of price points.

    Contract:
        No I/O, fully deterministic.  ``upsert_point`` and ``remove_point``
        return new tables; the receiver is never modified, so a table can
        be shared freely between threads.
    Guarantees:
        - ``points`` is non-empty and strictly ascending by size.
        - ``resolve_price`` never extrapolates.
    Non-goals:
        - Does not apply penalties (see PenaltyRuleSet).
        - Does not enforce configurable business limits (max size/price).
    """

    points: tuple[PricePoint, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", normalize_price_points(self.points))

    # -- construction -----------------------------------------------------

    @classmethod
    def from_points(cls, points: Iterable[PricePoint]) -> Self:
        return cls(points=tuple(points))

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[Any, Any]]) -> Self:
        return cls(points=tuple(PricePoint(size=s, price=p) for s, p in pairs))

    @classmethod
    def from_document(cls, document: list[dict[str, Any]]) -> Self:
        """Build from the persisted ``base_pricing`` document."""
        return cls(points=tuple(PricePoint.from_dict(d) for d in document))

    def to_document(self) -> list[dict[str, str]]:
        return [p.to_dict() for p in self.points]

    # -- inspection -------------------------------------------------------

    @property
    def sizes(self) -> tuple[Decimal, ...]:
        return tuple(p.size for p in self.points)

    @property
    def min_size(self) -> Decimal:
        return self.points[0].size

    @property
    def max_size(self) -> Decimal:
        return self.points[-1].size

    def __len__(self) -> int:
        return len(self.points)

    def __contains__(self, size: object) -> bool:
        try:
            return self._index_of(to_decimal(size, "size")) is not None
        except (TypeError, ValueError):
            return False

    def price_at(self, size: Any) -> Decimal:
        """Stored price for an exact size; raises PricePointNotFoundError."""
        size = to_decimal(size, "size")
        idx = self._index_of(size)
        if idx is None:
            raise PricePointNotFoundError(size)
        return self.points[idx].price

    def _index_of(self, size: Decimal) -> int | None:
        sizes = self.sizes
        idx = bisect_left(sizes, size)
        if idx < len(sizes) and sizes[idx] == size:
            return idx
        return None

    # -- mutation (returns new tables) -------------------------------------

    def upsert_point(self, size: Any, price: Any) -> Self:
        """Insert a point, or overwrite the price of an existing size."""
        point = PricePoint(size=size, price=price)
        kept = tuple(p for p in self.points if p.size != point.size)
        replaced = len(kept) != len(self.points)
        logger.debug("price_point_upserted", extra={
            "size": str(point.size),
            "price": str(point.price),
            "replaced": replaced,
        })
        return type(self)(points=kept + (point,))

    def remove_point(self, size: Any) -> Self:
        """Remove the point at ``size``; the last point cannot be removed."""
        size = to_decimal(size, "size")
        if self._index_of(size) is None:
            raise PricePointNotFoundError(size)
        if len(self.points) == 1:
            raise EmptyPriceTableError(
                f"Cannot remove size {size}: a price table requires at least one price point"
            )
        logger.debug("price_point_removed", extra={"size": str(size)})
        return type(self)(points=tuple(p for p in self.points if p.size != size))

    # -- resolution -------------------------------------------------------

    @traced_engine("price_table", "1.0", fingerprint_fields=("self", "size"))
    def resolve(self, size: Any) -> PriceResolution:
        """
        Resolve the base price for ``size``.

        Preconditions:
            size is convertible to Decimal.

        Postconditions:
            - Exact size: stored price, method EXACT_MATCH.
            - Strictly between s0 < size < s1:
              ``p0 + (p1 - p0) * (size - s0) / (s1 - s0)``, method INTERPOLATION.

        Raises:
            OutOfRangeError: size < min_size or size > max_size.
        """
        size = to_decimal(size, "size")
        sizes = self.sizes
        idx = bisect_left(sizes, size)

        if idx < len(sizes) and sizes[idx] == size:
            point = self.points[idx]
            return PriceResolution(
                size=size,
                price=point.price,
                method=ResolutionMethod.EXACT_MATCH,
                lower=point,
                upper=point,
            )

        if idx == 0 or idx == len(sizes):
            nearest = self.points[0] if idx == 0 else self.points[-1]
            logger.warning("price_size_out_of_range", extra={
                "size": str(size),
                "min_size": str(self.min_size),
                "max_size": str(self.max_size),
                "nearest_bound": str(nearest.size),
            })
            raise OutOfRangeError(
                size=size,
                nearest_bound=nearest.size,
                nearest_price=nearest.price,
                min_size=self.min_size,
                max_size=self.max_size,
            )

        lower = self.points[idx - 1]
        upper = self.points[idx]
        with localcontext(_ARITHMETIC):
            price = lower.price + (upper.price - lower.price) * (size - lower.size) / (
                upper.size - lower.size
            )

        logger.debug("price_interpolated", extra={
            "size": str(size),
            "lower_size": str(lower.size),
            "upper_size": str(upper.size),
            "price": str(price),
        })
        return PriceResolution(
            size=size,
            price=price,
            method=ResolutionMethod.INTERPOLATION,
            lower=lower,
            upper=upper,
        )

    def resolve_price(self, size: Any) -> Decimal:
        """Base price for ``size``; raises OutOfRangeError outside the table."""
        return self.resolve(size).price

    def resolve_with_policy(
        self,
        size: Any,
        policy: OutOfRangePolicy = OutOfRangePolicy.REJECT,
    ) -> PriceResolution:
        """Resolve ``size``, applying ``policy`` when it is out of range.

        REJECT re-raises OutOfRangeError.  CLAMP returns the nearest bound's
        price with method CLAMPED, so the caller can still see that the
        price was not negotiated for this size.
        """
        try:
            return self.resolve(size)
        except OutOfRangeError as exc:
            if OutOfRangePolicy(policy) is OutOfRangePolicy.REJECT:
                raise
            bound = PricePoint(size=exc.nearest_bound, price=exc.nearest_price)
            return PriceResolution(
                size=exc.size,
                price=exc.nearest_price,
                method=ResolutionMethod.CLAMPED,
                lower=bound,
                upper=bound,
            )
