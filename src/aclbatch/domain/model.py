"""ACL entry records and batch operation descriptors.

Each batch operation kind is its own dataclass carrying only the fields that kind may set.
``None`` always means "not set"; ``negated=False`` or ``comment=""`` are values.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from enum import StrEnum
from typing import TYPE_CHECKING, Final, TypeAlias

if TYPE_CHECKING:
    from datetime import datetime

EntryId: TypeAlias = str
ServiceId: TypeAlias = str
AclId: TypeAlias = str


class BatchOperation(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


OPERATION_KEY: Final[str] = "op"
ENTRY_FIELDS: Final[tuple[str, ...]] = ("id", "ip", "subnet", "negated", "comment")


@dataclass(slots=True, frozen=True)
class ACLEntry:
    """An entry as stored by the remote ACL; ``id`` is its only stable identity."""

    id: EntryId
    acl_id: AclId
    service_id: ServiceId
    ip: str
    subnet: int | None = None
    negated: bool = False
    comment: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(slots=True, frozen=True)
class CreateEntry:
    ip: str
    subnet: int | None = None
    negated: bool | None = None
    comment: str | None = None

    operation = BatchOperation.CREATE


@dataclass(slots=True, frozen=True)
class UpdateEntry:
    id: EntryId
    ip: str | None = None
    subnet: int | None = None
    negated: bool | None = None
    comment: str | None = None

    operation = BatchOperation.UPDATE


@dataclass(slots=True, frozen=True)
class DeleteEntry:
    id: EntryId

    operation = BatchOperation.DELETE


BatchACLEntry: TypeAlias = CreateEntry | UpdateEntry | DeleteEntry
RawBatchEntry: TypeAlias = Mapping[str, object]

ENTRY_TYPES: Final[dict[BatchOperation, type[CreateEntry | UpdateEntry | DeleteEntry]]] = {
    BatchOperation.CREATE: CreateEntry,
    BatchOperation.UPDATE: UpdateEntry,
    BatchOperation.DELETE: DeleteEntry,
}


def fields_present(op: BatchACLEntry | RawBatchEntry) -> frozenset[str]:
    """Return the names of the entry fields that are actually set on ``op``.

    Works for typed entries and for raw mappings such as decoded JSON; the operation
    discriminator itself is never reported.
    """

    if isinstance(op, Mapping):
        return frozenset(
            name for name, value in op.items() if name != OPERATION_KEY and value is not None
        )
    return frozenset(
        field.name for field in fields(op) if getattr(op, field.name) is not None
    )


def field_value(op: BatchACLEntry | RawBatchEntry, name: str) -> object:
    if isinstance(op, Mapping):
        return op.get(name)
    return getattr(op, name, None)


def entry_id(op: BatchACLEntry) -> EntryId | None:
    """Return the id targeted by ``op``, or ``None`` for creates."""

    if isinstance(op, CreateEntry):
        return None
    return op.id


def to_wire_fields(op: BatchACLEntry) -> dict[str, object]:
    """Return the discriminator plus every present field, omitting unset ones."""

    payload: dict[str, object] = {OPERATION_KEY: str(op.operation)}
    for name in ENTRY_FIELDS:
        value = getattr(op, name, None)
        if value is not None:
            payload[name] = value
    return payload
