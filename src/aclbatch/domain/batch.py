"""Assemble validated operations into a single batch submission."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from .errors import BatchTooLarge, DuplicateTarget, EmptyBatch, InvalidOperation, ValidationError
from .model import CreateEntry, entry_id
from .validation import coerce

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .model import AclId, BatchACLEntry, EntryId, RawBatchEntry, ServiceId

log = getLogger(__name__)

MAX_BATCH_SIZE: Final[int] = 1000


@dataclass(slots=True, frozen=True)
class BatchModifyACLEntriesRequest:
    """One batch of operations against a single ACL, consumed by one submission."""

    service_id: ServiceId
    acl_id: AclId
    operations: tuple[BatchACLEntry, ...]

    def __len__(self) -> int:
        return len(self.operations)

    @property
    def has_creates(self) -> bool:
        return any(isinstance(op, CreateEntry) for op in self.operations)

    @property
    def is_idempotent(self) -> bool:
        """True when every operation targets an existing id and may be safely repeated."""
        return not self.has_creates


def build_batch(
    service_id: ServiceId,
    acl_id: AclId,
    operations: Iterable[BatchACLEntry | RawBatchEntry],
    *,
    max_size: int = MAX_BATCH_SIZE,
) -> BatchModifyACLEntriesRequest:
    """Validate ``operations`` in order and package them into a request.

    The caller's sequence is copied, never mutated, reordered or deduplicated. Raises
    ``EmptyBatch``, ``BatchTooLarge``, ``InvalidOperation`` (carrying the offending index)
    or ``DuplicateTarget``.
    """

    if not service_id or not service_id.strip():
        raise ValueError("service_id must not be blank")
    if not acl_id or not acl_id.strip():
        raise ValueError("acl_id must not be blank")

    snapshot = list(operations)
    if not snapshot:
        raise EmptyBatch
    if len(snapshot) > max_size:
        raise BatchTooLarge(len(snapshot), max_size)

    validated: list[BatchACLEntry] = []
    for index, op in enumerate(snapshot):
        try:
            validated.append(coerce(op))
        except ValidationError as exc:
            raise InvalidOperation(index, exc) from exc

    _reject_duplicate_targets(validated)

    log.debug(
        "Built batch for service=%s acl=%s with %d operations", service_id, acl_id, len(validated)
    )
    return BatchModifyACLEntriesRequest(
        service_id=service_id,
        acl_id=acl_id,
        operations=tuple(validated),
    )


def _reject_duplicate_targets(operations: Sequence[BatchACLEntry]) -> None:
    positions: defaultdict[EntryId, list[int]] = defaultdict(list)
    for index, op in enumerate(operations):
        target = entry_id(op)
        if target is not None:
            positions[target].append(index)
    for target, indexes in positions.items():
        if len(indexes) > 1:
            raise DuplicateTarget(target, indexes)
