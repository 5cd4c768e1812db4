"""Ports for the remote ACL service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .model import ACLEntry, AclId, ServiceId


@dataclass(slots=True, frozen=True)
class TransportResponse:
    """Status and raw body of a completed remote call."""

    status_code: int
    body: bytes = b""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300  # noqa: PLR2004


@runtime_checkable
class Transport(Protocol):
    """Issues one logical call against the remote API.

    Implementations raise ``TransportError`` when no response could be obtained
    (connection failure, timeout). ``timeout`` is the time left for this call in seconds.
    """

    async def send(
        self,
        method: str,
        path: str,
        body: bytes,
        *,
        timeout: float | None = None,
    ) -> TransportResponse: ...


@runtime_checkable
class ACLEntryLister(Protocol):
    """Returns every entry of an ACL, in no particular order."""

    async def list_entries(self, service_id: ServiceId, acl_id: AclId) -> list[ACLEntry]: ...


__all__ = ["ACLEntryLister", "Transport", "TransportResponse"]
