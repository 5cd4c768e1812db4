"""Deterministic views over remote ACL listings.

The remote listing endpoint makes no ordering guarantee, so both sides of any comparison
must go through ``normalize`` first.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .model import ACLEntry, AclId, ServiceId
    from .ports import ACLEntryLister

EntryFingerprint: TypeAlias = tuple[str, int | None, bool, str]


def _sort_key(entry: ACLEntry) -> tuple[bytes, bytes]:
    return entry.ip.encode("utf-8"), entry.id.encode("utf-8")


def normalize(entries: Iterable[ACLEntry]) -> list[ACLEntry]:
    """Order entries by ``ip`` (bytewise), breaking ties by ``id``."""

    return sorted(entries, key=_sort_key)


def entry_fingerprint(entry: ACLEntry) -> EntryFingerprint:
    """Return the caller-controlled fields of ``entry``, ignoring its remote identity."""

    return (entry.ip, entry.subnet, entry.negated, entry.comment)


async def fetch_normalized(
    lister: ACLEntryLister,
    service_id: ServiceId,
    acl_id: AclId,
) -> list[ACLEntry]:
    return normalize(await lister.list_entries(service_id, acl_id))
