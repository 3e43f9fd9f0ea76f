"""
Seafood Kernel - contract pricing primitives

The lowest layer of the contract pricing engine:
- Typed exceptions with machine-readable codes
- Structured JSON logging
- Frozen value objects for price points, penalty rules and contracts
- Deterministic clock abstraction
"""

__version__ = "0.1.0"
