"""
Contract Payload Validator (``seafood_modules.contracts.validator``).

Responsibility
--------------
Turns raw, request-shaped dicts into normalized, typed values
(``ContractDraft``, ``PricingUpdate``, ``DeliveriesUpdate``,
``StatusUpdate``, ``ListQuery``) or a complete list of field errors.
Also generates contract identifiers.

Architecture position
---------------------
**Modules layer** -- pure functions, ZERO I/O apart from logging.  Reads
limits from ``seafood_config.ContractSettings``; never raises on bad
input, returns ``ValidationResult`` instead.

Invariants enforced
-------------------
* Non-short-circuiting: every violation in a payload is reported, each
  ``FieldError`` pointing at its field path (``base_pricing[1].price``).
* Exactly one of ``supplier_id`` / ``supplier_name``
  (``SUPPLIER_REQUIRED`` / ``SUPPLIER_CONFLICT``).
* Sizes within one price table are pairwise distinct (``DUPLICATE_SIZE``).
* A steep price rise between consecutive sizes is a ``PricingWarning``,
  never an error.

Failure modes
-------------
* Invalid payload  -> ``ValidationResult.failure``; ``unwrap()`` raises
  ``ValidationError`` carrying every ``FieldError``.
"""

from __future__ import annotations

import random
import re
from collections.abc import Mapping
from decimal import Decimal
from typing import Any
from uuid import UUID

from seafood_config.schema import ORDER_BY_FIELDS, SORT_ORDERS, ContractSettings
from seafood_kernel.domain.clock import Clock
from seafood_kernel.domain.dtos import FieldError, PricingWarning, ValidationResult
from seafood_kernel.domain.values import (
    CONTRACT_ID_PATTERN,
    ContractStatus,
    ContractType,
    Delivery,
    DeliveryUnit,
    PenaltyRule,
    PenaltyUnit,
    PricePoint,
    to_decimal,
)
from seafood_kernel.exceptions import DuplicateSizeError, UnsupportedUnitError
from seafood_kernel.logging_config import get_logger
from seafood_modules.contracts.models import (
    ContractDraft,
    DeliveriesUpdate,
    ListQuery,
    PricingUpdate,
    StatusUpdate,
)

logger = get_logger("modules.contracts.validator")

# Field error codes
FIELD_REQUIRED = "FIELD_REQUIRED"
UNKNOWN_FIELD = "UNKNOWN_FIELD"
INVALID_TYPE = "INVALID_TYPE"
INVALID_CHOICE = "INVALID_CHOICE"
INVALID_NUMBER = "INVALID_NUMBER"
INVALID_INTEGER = "INVALID_INTEGER"
NOT_POSITIVE = "NOT_POSITIVE"
NEGATIVE_VALUE = "NEGATIVE_VALUE"
EXCEEDS_MAXIMUM = "EXCEEDS_MAXIMUM"
BELOW_MINIMUM = "BELOW_MINIMUM"
INVALID_LENGTH = "INVALID_LENGTH"
INVALID_UUID = "INVALID_UUID"
INVALID_CONTRACT_ID = "INVALID_CONTRACT_ID"
EMPTY_LIST = "EMPTY_LIST"
EMPTY_UPDATE = "EMPTY_UPDATE"
SUPPLIER_REQUIRED = "SUPPLIER_REQUIRED"
SUPPLIER_CONFLICT = "SUPPLIER_CONFLICT"
DUPLICATE_SIZE = DuplicateSizeError.code
UNSUPPORTED_UNIT = UnsupportedUnitError.code

# Warning codes
PRICE_JUMP = "PRICE_JUMP"

_CONTRACT_ID_RE = re.compile(CONTRACT_ID_PATTERN, re.ASCII)
_INTEGER_RE = re.compile(r"-?[0-9]+", re.ASCII)

_CREATE_FIELDS = frozenset({
    "id", "contract_type", "supplier_id", "supplier_name",
    "base_pricing", "size_penalties", "status",
})
_PRICING_FIELDS = frozenset({"base_pricing", "size_penalties"})
_DELIVERIES_FIELDS = frozenset({"deliveries", "contract_type"})
_STATUS_FIELDS = frozenset({"status"})
_LIST_FIELDS = frozenset({"status", "page", "limit", "orderBy", "order"})


class _Collector:
    """Accumulates field errors and pricing warnings for one payload."""

    def __init__(self) -> None:
        self.errors: list[FieldError] = []
        self.warnings: list[PricingWarning] = []

    def add(self, code: str, message: str, field: str | None = None, **details: Any) -> None:
        self.errors.append(
            FieldError(code=code, message=message, field=field, details=details or None)
        )

    def mark(self) -> int:
        return len(self.errors)

    def clean_since(self, mark: int) -> bool:
        return len(self.errors) == mark

    def result(self, value: Any, operation: str) -> ValidationResult:
        if self.errors:
            logger.warning("validation_failed", extra={
                "operation": operation,
                "error_count": len(self.errors),
                "error_codes": [e.code for e in self.errors],
            })
            return ValidationResult.failure(*self.errors, warnings=tuple(self.warnings))
        if self.warnings:
            logger.info("validation_passed_with_warnings", extra={
                "operation": operation,
                "warning_count": len(self.warnings),
            })
        return ValidationResult.success(value, warnings=tuple(self.warnings))


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _settings(settings: ContractSettings | None) -> ContractSettings:
    return settings if settings is not None else ContractSettings()


def _check_mapping(payload: Any, out: _Collector) -> bool:
    if not isinstance(payload, Mapping):
        out.add(INVALID_TYPE, f"Payload must be an object, got {type(payload).__name__}")
        return False
    return True


def _check_unknown(payload: Mapping, allowed: frozenset[str], out: _Collector) -> None:
    for key in sorted(set(payload) - allowed, key=str):
        out.add(UNKNOWN_FIELD, f"'{key}' is not allowed", field=str(key))


def _decimal(value: Any, field: str, out: _Collector) -> Decimal | None:
    if value is None:
        out.add(FIELD_REQUIRED, f"{field} is required", field=field)
        return None
    try:
        return to_decimal(value, field)
    except (TypeError, ValueError):
        out.add(INVALID_NUMBER, f"{field} must be a number", field=field, value=repr(value))
        return None


def _positive(
    value: Any, field: str, out: _Collector, maximum: Decimal | None = None,
) -> Decimal | None:
    number = _decimal(value, field, out)
    if number is None:
        return None
    if number <= 0:
        out.add(NOT_POSITIVE, f"{field} must be greater than 0", field=field, value=str(number))
        return None
    if maximum is not None and number > maximum:
        out.add(
            EXCEEDS_MAXIMUM, f"{field} must not exceed {maximum}",
            field=field, value=str(number), maximum=str(maximum),
        )
        return None
    return number


def _non_negative(
    value: Any, field: str, out: _Collector, maximum: Decimal | None = None,
) -> Decimal | None:
    number = _decimal(value, field, out)
    if number is None:
        return None
    if number < 0:
        out.add(NEGATIVE_VALUE, f"{field} cannot be negative", field=field, value=str(number))
        return None
    if maximum is not None and number > maximum:
        out.add(
            EXCEEDS_MAXIMUM, f"{field} must not exceed {maximum}",
            field=field, value=str(number), maximum=str(maximum),
        )
        return None
    return number


def _text(value: Any, field: str, out: _Collector, max_length: int) -> str | None:
    """Trimmed string of 1..max_length characters."""
    if value is None:
        out.add(FIELD_REQUIRED, f"{field} is required", field=field)
        return None
    if not isinstance(value, str):
        out.add(INVALID_TYPE, f"{field} must be a string", field=field)
        return None
    text = value.strip()
    if not 1 <= len(text) <= max_length:
        out.add(
            INVALID_LENGTH, f"{field} must be between 1 and {max_length} characters",
            field=field, length=len(text), maximum=max_length,
        )
        return None
    return text


def _choice(value: Any, field: str, enum_cls: type, out: _Collector):
    allowed = tuple(m.value for m in enum_cls)
    if value is None:
        out.add(FIELD_REQUIRED, f"{field} is required", field=field)
        return None
    try:
        return enum_cls(value)
    except ValueError:
        out.add(
            INVALID_CHOICE, f"{field} must be one of: {', '.join(allowed)}",
            field=field, value=repr(value), allowed=allowed,
        )
        return None


def _uuid(value: Any, field: str, out: _Collector) -> UUID | None:
    if isinstance(value, UUID):
        return value
    if isinstance(value, str):
        try:
            return UUID(value.strip())
        except ValueError:
            pass
    out.add(INVALID_UUID, f"{field} must be a valid UUID", field=field, value=repr(value))
    return None


def _integer(value: Any, field: str, out: _Collector) -> int | None:
    if isinstance(value, bool):
        out.add(INVALID_INTEGER, f"{field} must be an integer", field=field)
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INTEGER_RE.fullmatch(value.strip()):
        return int(value.strip())
    out.add(INVALID_INTEGER, f"{field} must be an integer", field=field, value=repr(value))
    return None


def _items(value: Any, field: str, out: _Collector, allow_empty: bool) -> list | None:
    if value is None:
        out.add(FIELD_REQUIRED, f"{field} is required", field=field)
        return None
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, (list, tuple)):
        out.add(INVALID_TYPE, f"{field} must be a list", field=field)
        return None
    if not value and not allow_empty:
        out.add(EMPTY_LIST, f"{field} requires at least one entry", field=field)
        return None
    return list(value)


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def _price_points(
    value: Any, settings: ContractSettings, out: _Collector,
) -> tuple[PricePoint, ...] | None:
    items = _items(value, "base_pricing", out, allow_empty=False)
    if items is None:
        return None

    limits = settings.validation
    mark = out.mark()
    points: list[PricePoint] = []
    sizes: list[Decimal] = []
    for i, item in enumerate(items):
        path = f"base_pricing[{i}]"
        if isinstance(item, PricePoint):
            item = {"size": item.size, "price": item.price}
        if not isinstance(item, Mapping):
            out.add(INVALID_TYPE, f"{path} must be an object", field=path)
            continue
        size = _positive(item.get("size"), f"{path}.size", out, limits.max_size)
        price = _non_negative(item.get("price"), f"{path}.price", out, limits.max_price)
        if size is not None:
            sizes.append(size)
        if size is not None and price is not None:
            points.append(PricePoint(size=size, price=price))

    # Sizes whose price failed still count towards duplicates.
    duplicates = sorted({s for s in sizes if sizes.count(s) > 1})
    if duplicates:
        out.add(
            DUPLICATE_SIZE, "Duplicate sizes are not allowed in pricing data",
            field="base_pricing", sizes=tuple(str(s) for s in duplicates),
        )
    if not out.clean_since(mark):
        return None

    ordered = tuple(sorted(points, key=lambda p: p.size))
    out.warnings.extend(price_jump_warnings(ordered, limits.price_jump_warning_ratio))
    return ordered


def price_jump_warnings(
    points: tuple[PricePoint, ...], ratio: Decimal,
) -> tuple[PricingWarning, ...]:
    """Warnings for each size whose price exceeds ``ratio`` x the previous size's price.

    ``points`` must be sorted by size.
    """
    warnings = []
    for previous, current in zip(points, points[1:]):
        if current.price > previous.price * ratio:
            warnings.append(PricingWarning(
                code=PRICE_JUMP,
                message=(
                    f"Size {current.size} price ({current.price}) is significantly "
                    f"higher than size {previous.size} price ({previous.price})"
                ),
                size=current.size,
                price=current.price,
                previous_size=previous.size,
                previous_price=previous.price,
            ))
    return tuple(warnings)


def _penalty_rules(
    value: Any, settings: ContractSettings, out: _Collector,
) -> tuple[PenaltyRule, ...] | None:
    items = _items(value, "size_penalties", out, allow_empty=True)
    if items is None:
        return None

    max_label = settings.validation.max_range_label_length
    mark = out.mark()
    rules: list[PenaltyRule] = []
    for i, item in enumerate(items):
        path = f"size_penalties[{i}]"
        if isinstance(item, PenaltyRule):
            rules.append(item)
            continue
        if not isinstance(item, Mapping):
            out.add(INVALID_TYPE, f"{path} must be an object", field=path)
            continue
        label = _text(item.get("range"), f"{path}.range", out, max_label)
        raw_amount = item["amount"] if "amount" in item else item.get("penalty_amount")
        amount = _non_negative(raw_amount, f"{path}.penalty_amount", out)
        unit = None
        if item.get("unit") is None:
            out.add(FIELD_REQUIRED, f"{path}.unit is required", field=f"{path}.unit")
        else:
            try:
                unit = PenaltyUnit.parse(item["unit"])
            except UnsupportedUnitError as exc:
                out.add(
                    UNSUPPORTED_UNIT, str(exc), field=f"{path}.unit",
                    value=repr(exc.unit), allowed=exc.allowed,
                )
        if label is not None and amount is not None and unit is not None:
            rules.append(PenaltyRule(range_label=label, amount=amount, unit=unit))

    return tuple(rules) if out.clean_since(mark) else None


def _deliveries(
    value: Any, settings: ContractSettings, out: _Collector,
) -> tuple[Delivery, ...] | None:
    items = _items(value, "deliveries", out, allow_empty=True)
    if items is None:
        return None

    limits = settings.validation
    mark = out.mark()
    deliveries: list[Delivery] = []
    for i, item in enumerate(items):
        path = f"deliveries[{i}]"
        if isinstance(item, Delivery):
            deliveries.append(item)
            continue
        if not isinstance(item, Mapping):
            out.add(INVALID_TYPE, f"{path} must be an object", field=path)
            continue
        date = _text(item.get("date"), f"{path}.date", out, limits.max_delivery_date_length)
        quantity = _positive(item.get("quantity"), f"{path}.quantity", out)
        raw_range = item["sizeRange"] if "sizeRange" in item else item.get("size_range")
        size_range = _text(raw_range, f"{path}.sizeRange", out, limits.max_range_label_length)
        unit = None
        if item.get("unit") is None:
            out.add(FIELD_REQUIRED, f"{path}.unit is required", field=f"{path}.unit")
        else:
            try:
                unit = DeliveryUnit.parse(item["unit"])
            except UnsupportedUnitError as exc:
                out.add(
                    UNSUPPORTED_UNIT, str(exc), field=f"{path}.unit",
                    value=repr(exc.unit), allowed=exc.allowed,
                )
        if None not in (date, quantity, size_range, unit):
            deliveries.append(
                Delivery(date=date, quantity=quantity, unit=unit, size_range=size_range)
            )

    return tuple(deliveries) if out.clean_since(mark) else None


# ---------------------------------------------------------------------------
# Public validators
# ---------------------------------------------------------------------------


def validate_contract_id(value: Any) -> ValidationResult[str]:
    """Check ``value`` against the ``L########.###.00`` identifier format."""
    if isinstance(value, str) and _CONTRACT_ID_RE.fullmatch(value):
        return ValidationResult.success(value)
    return ValidationResult.failure(FieldError(
        code=INVALID_CONTRACT_ID,
        message="Contract ID must follow format L12345678.123.00",
        field="id",
        details={"value": repr(value)},
    ))


def validate_contract_payload(
    payload: Any, settings: ContractSettings | None = None,
) -> ValidationResult[ContractDraft]:
    """
    Validate a create-contract payload.

    Postconditions:
        - On success ``value`` is a ``ContractDraft`` with price points
          sorted by size, penalties and supplier normalized, status
          defaulted to Open.
        - Warnings (price jumps) may accompany success or failure.
    """
    settings = _settings(settings)
    out = _Collector()
    if not _check_mapping(payload, out):
        return out.result(None, "create_contract")
    _check_unknown(payload, _CREATE_FIELDS, out)

    contract_id = None
    if payload.get("id") is not None:
        id_result = validate_contract_id(payload["id"])
        out.errors.extend(id_result.errors)
        contract_id = id_result.value

    contract_type = _choice(payload.get("contract_type"), "contract_type", ContractType, out)

    supplier_id = None
    supplier_name = None
    has_id = payload.get("supplier_id") is not None
    has_name = payload.get("supplier_name") is not None
    if has_id and has_name:
        out.add(
            SUPPLIER_CONFLICT,
            "Provide either supplier_id or supplier_name, not both",
            field="supplier_id",
        )
    elif not has_id and not has_name:
        out.add(
            SUPPLIER_REQUIRED,
            "Either supplier_id or supplier_name is required",
            field="supplier_id",
        )
    elif has_id:
        supplier_id = _uuid(payload["supplier_id"], "supplier_id", out)
    else:
        supplier_name = _text(
            payload["supplier_name"], "supplier_name", out,
            settings.validation.max_supplier_name_length,
        )

    base_pricing = _price_points(payload.get("base_pricing"), settings, out)

    size_penalties: tuple[PenaltyRule, ...] | None = ()
    if payload.get("size_penalties") is not None:
        size_penalties = _penalty_rules(payload["size_penalties"], settings, out)

    status = ContractStatus.OPEN
    if payload.get("status") is not None:
        status = _choice(payload["status"], "status", ContractStatus, out)

    if out.errors:
        return out.result(None, "create_contract")

    draft = ContractDraft(
        contract_type=contract_type,
        base_pricing=base_pricing,
        size_penalties=size_penalties,
        supplier_id=supplier_id,
        supplier_name=supplier_name,
        status=status,
        contract_id=contract_id,
    )
    return out.result(draft, "create_contract")


def validate_pricing_update(
    payload: Any, settings: ContractSettings | None = None,
) -> ValidationResult[PricingUpdate]:
    """Validate a GM pricing edit: ``base_pricing`` and/or ``size_penalties``."""
    settings = _settings(settings)
    out = _Collector()
    if not _check_mapping(payload, out):
        return out.result(None, "update_pricing")
    _check_unknown(payload, _PRICING_FIELDS, out)

    present = [k for k in ("base_pricing", "size_penalties") if payload.get(k) is not None]
    if not present:
        out.add(EMPTY_UPDATE, "Provide base_pricing and/or size_penalties")
        return out.result(None, "update_pricing")

    base_pricing = None
    if "base_pricing" in present:
        base_pricing = _price_points(payload["base_pricing"], settings, out)
    size_penalties = None
    if "size_penalties" in present:
        size_penalties = _penalty_rules(payload["size_penalties"], settings, out)

    if out.errors:
        return out.result(None, "update_pricing")
    return out.result(
        PricingUpdate(base_pricing=base_pricing, size_penalties=size_penalties),
        "update_pricing",
    )


def validate_deliveries_update(
    payload: Any, settings: ContractSettings | None = None,
) -> ValidationResult[DeliveriesUpdate]:
    """Validate a supplier deliveries submission (``deliveries``, optional ``contract_type``)."""
    settings = _settings(settings)
    out = _Collector()
    if not _check_mapping(payload, out):
        return out.result(None, "update_deliveries")
    _check_unknown(payload, _DELIVERIES_FIELDS, out)

    deliveries = _deliveries(payload.get("deliveries"), settings, out)
    contract_type = None
    if payload.get("contract_type") is not None:
        contract_type = _choice(payload["contract_type"], "contract_type", ContractType, out)

    if out.errors:
        return out.result(None, "update_deliveries")
    return out.result(
        DeliveriesUpdate(deliveries=deliveries, contract_type=contract_type),
        "update_deliveries",
    )


def validate_status_update(payload: Any) -> ValidationResult[StatusUpdate]:
    """Validate ``{"status": "Open" | "Closed"}``."""
    out = _Collector()
    if not _check_mapping(payload, out):
        return out.result(None, "update_status")
    _check_unknown(payload, _STATUS_FIELDS, out)
    status = _choice(payload.get("status"), "status", ContractStatus, out)
    if out.errors:
        return out.result(None, "update_status")
    return out.result(StatusUpdate(status=status), "update_status")


def validate_list_query(
    params: Any, settings: ContractSettings | None = None,
) -> ValidationResult[ListQuery]:
    """Validate contract list parameters, applying listing defaults.

    Integer parameters may arrive as query-string text (``"2"``).
    """
    listing = _settings(settings).listing
    out = _Collector()
    if params is None:
        params = {}
    if not _check_mapping(params, out):
        return out.result(None, "list_contracts")
    _check_unknown(params, _LIST_FIELDS, out)

    status = None
    if params.get("status") is not None:
        status = _choice(params["status"], "status", ContractStatus, out)

    page = listing.default_page
    if params.get("page") is not None:
        page = _integer(params["page"], "page", out)
        if page is not None and page < 1:
            out.add(BELOW_MINIMUM, "page must be at least 1", field="page", value=page)

    limit = listing.default_limit
    if params.get("limit") is not None:
        limit = _integer(params["limit"], "limit", out)
        if limit is not None and not 1 <= limit <= listing.max_limit:
            out.add(
                EXCEEDS_MAXIMUM if limit > listing.max_limit else BELOW_MINIMUM,
                f"limit must be between 1 and {listing.max_limit}",
                field="limit", value=limit,
            )

    order_by = params.get("orderBy", listing.default_order_by)
    if order_by not in ORDER_BY_FIELDS:
        out.add(
            INVALID_CHOICE, f"orderBy must be one of: {', '.join(ORDER_BY_FIELDS)}",
            field="orderBy", value=repr(order_by), allowed=ORDER_BY_FIELDS,
        )

    order = params.get("order", listing.default_order)
    if order not in SORT_ORDERS:
        out.add(
            INVALID_CHOICE, f"order must be one of: {', '.join(SORT_ORDERS)}",
            field="order", value=repr(order), allowed=SORT_ORDERS,
        )

    if out.errors:
        return out.result(None, "list_contracts")
    return out.result(
        ListQuery(status=status, page=page, limit=limit, order_by=order_by, order=order),
        "list_contracts",
    )


def generate_contract_id(clock: Clock, rng: random.Random | None = None) -> str:
    """Build ``L{last 8 digits of epoch millis}.{3-digit random}.00``.

    Identifiers generated within the same millisecond differ only by the
    random part; uniqueness is enforced by storage, not here.
    """
    rng = rng or random.Random()
    millis = clock.epoch_millis() % 100_000_000
    suffix = rng.randrange(1000)
    return f"L{millis:08d}.{suffix:03d}.00"
