"""
Module: seafood_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    pricing engines.  This is the canonical import surface for
    seafood_modules.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import seafood_kernel (and sibling engine modules).
    MUST NOT import seafood_modules or seafood_config.

Invariants enforced:
    - Purity: engines never read the clock or touch storage.
    - Decimal-only arithmetic: sizes, prices and quantities are ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Engine entry points are wrapped by ``@traced_engine`` (see
    ``seafood_engines.tracer``), emitting SEAFOOD_ENGINE_TRACE records.

Usage:
    from seafood_engines import PriceTable, PenaltyRuleSet, PricingResolver
"""

from seafood_kernel.logging_config import get_logger

logger = get_logger("engines")

from seafood_engines.penalties import (
    AppliedPenalty,
    PenaltyBreakdown,
    PenaltyRuleSet,
    SizeRangeClassifier,
    WeightFactor,
)
from seafood_engines.price_table import (
    OutOfRangePolicy,
    PriceResolution,
    PriceTable,
    ResolutionMethod,
)
from seafood_engines.pricing import PricingResolver, Quote, ScheduleLine
from seafood_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # price_table
    "OutOfRangePolicy",
    "PriceResolution",
    "PriceTable",
    "ResolutionMethod",
    # penalties
    "AppliedPenalty",
    "PenaltyBreakdown",
    "PenaltyRuleSet",
    "SizeRangeClassifier",
    "WeightFactor",
    # pricing
    "PricingResolver",
    "Quote",
    "ScheduleLine",
    # tracer
    "compute_input_fingerprint",
    "traced_engine",
]

logger.debug("engines_package_loaded", extra={
    "module_count": 4,
    "modules": ["price_table", "penalties", "pricing", "tracer"],
})
