"""
Seafood Modules.

Thin orchestration layers over the kernel and the pricing engines.
Each module contains:
- Request/response models (the nouns)
- Validators (payload -> typed values or field errors)
- Lifecycle (state machine declared as a Workflow)
- A service facade wiring the flow together

Modules:
- Contracts: seafood purchase contracts between the GM and suppliers

Actual pricing logic lives in the engines.
"""

from seafood_modules import contracts

__all__ = ["contracts"]
