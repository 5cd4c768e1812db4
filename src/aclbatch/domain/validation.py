"""Per-operation field contracts for batch ACL entries.

Validation is local and total: each operation is either accepted or rejected with a precise
``ValidationError`` before anything is transmitted.
"""

from __future__ import annotations

import ipaddress
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from .errors import (
    EmptyUpdate,
    ForbiddenField,
    InvalidAddress,
    InvalidFieldType,
    InvalidSubnet,
    MissingRequiredField,
    UnknownOperation,
)
from .model import (
    ENTRY_FIELDS,
    ENTRY_TYPES,
    OPERATION_KEY,
    BatchOperation,
    field_value,
    fields_present,
)

if TYPE_CHECKING:
    from .model import BatchACLEntry, RawBatchEntry

IPV4_MAX_PREFIX: Final[int] = 32
IPV6_MAX_PREFIX: Final[int] = 128


@dataclass(frozen=True, slots=True)
class FieldContract:
    required: frozenset[str]
    forbidden: frozenset[str]


CONTRACTS: Final[dict[BatchOperation, FieldContract]] = {
    BatchOperation.CREATE: FieldContract(
        required=frozenset({"ip"}),
        forbidden=frozenset({"id"}),
    ),
    BatchOperation.UPDATE: FieldContract(
        required=frozenset({"id"}),
        forbidden=frozenset(),
    ),
    BatchOperation.DELETE: FieldContract(
        required=frozenset({"id"}),
        forbidden=frozenset({"ip", "subnet", "negated", "comment"}),
    ),
}

_FIELD_TYPES: Final[dict[str, tuple[type, str]]] = {
    "id": (str, "a string"),
    "ip": (str, "a string"),
    "comment": (str, "a string"),
    "negated": (bool, "a boolean"),
}


def operation_of(op: BatchACLEntry | RawBatchEntry) -> BatchOperation:
    """Return the operation kind of a typed entry or a raw mapping."""

    if not isinstance(op, Mapping):
        return op.operation
    tag = op.get(OPERATION_KEY)
    try:
        return BatchOperation(tag)
    except ValueError:
        raise UnknownOperation(tag) from None


def validate(op: BatchACLEntry | RawBatchEntry) -> BatchOperation:
    """Check ``op`` against its operation's field contract.

    Returns the operation kind on success and raises a ``ValidationError`` subclass
    otherwise. Field presence rules are checked before value rules, so a Delete carrying an
    ``ip`` is reported as ``ForbiddenField`` even when the address is malformed.
    """

    operation = operation_of(op)
    contract = CONTRACTS[operation]
    present = fields_present(op)

    unknown = sorted(present - set(ENTRY_FIELDS))
    if unknown:
        raise ForbiddenField(unknown[0], operation=operation)
    for name in ENTRY_FIELDS:
        if name in contract.required and name not in present:
            raise MissingRequiredField(name)
    for name in ENTRY_FIELDS:
        if name in contract.forbidden and name in present:
            raise ForbiddenField(name, operation=operation)

    for name in present:
        _check_type(name, field_value(op, name))

    if operation is BatchOperation.UPDATE and present == {"id"}:
        raise EmptyUpdate(_as_str(field_value(op, "id")))

    ip = field_value(op, "ip")
    maximum = _max_prefix(ip) if isinstance(ip, str) else IPV6_MAX_PREFIX
    if "subnet" in present:
        _check_subnet(field_value(op, "subnet"), ip=_as_str(ip), maximum=maximum)

    return operation


def coerce(op: BatchACLEntry | RawBatchEntry) -> BatchACLEntry:
    """Validate ``op`` and return it as a typed entry."""

    operation = validate(op)
    if not isinstance(op, Mapping):
        return op
    entry_type = ENTRY_TYPES[operation]
    values = {name: op[name] for name in fields_present(op)}
    return entry_type(**values)  # pyright: ignore[reportArgumentType]


def _check_type(name: str, value: object) -> None:
    if name == "subnet":
        return
    expected_type, description = _FIELD_TYPES[name]
    if not isinstance(value, expected_type):
        raise InvalidFieldType(name, description, value)


def _check_subnet(subnet: object, *, ip: str | None, maximum: int) -> None:
    if isinstance(subnet, bool) or not isinstance(subnet, int):
        raise InvalidFieldType("subnet", "an integer", subnet)
    if not 0 <= subnet <= maximum:
        raise InvalidSubnet(subnet, ip=ip, maximum=maximum)


def _max_prefix(ip: str) -> int:
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        raise InvalidAddress(ip) from None
    return IPV4_MAX_PREFIX if address.version == 4 else IPV6_MAX_PREFIX  # noqa: PLR2004


def _as_str(value: object) -> str | None:
    return value if isinstance(value, str) else None
