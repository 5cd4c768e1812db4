"""HTTP adapter for the Fastly ACL entries API."""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx
from pydantic import ValidationError as PayloadValidationError

from aclbatch.adapters.http_resilience import ResilientClient
from aclbatch.domain.errors import RemoteRejected, TransportError
from aclbatch.domain.ports import TransportResponse
from aclbatch.wire import batch_path, decode_entries, decode_error_message

if TYPE_CHECKING:
    from types import TracebackType

    from aclbatch.config import FastlyConfig, ResilienceConfig
    from aclbatch.domain.model import ACLEntry, AclId, ServiceId

log = getLogger(__name__)

DEFAULT_PAGE_SIZE: Final[int] = 100
AUTH_HEADER: Final[str] = "Fastly-Key"


class FastlyACLClient:
    """Transport and lister for one Fastly account.

    ``send`` never raises for HTTP error statuses; only failures to obtain a response are
    raised, as ``TransportError``.
    """

    def __init__(
        self,
        config: FastlyConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.config = config
        self.page_size = page_size
        self._client = ResilientClient(_with_auth(config), transport=transport)

    async def __aenter__(self) -> FastlyACLClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def send(
        self,
        method: str,
        path: str,
        body: bytes,
        *,
        timeout: float | None = None,
    ) -> TransportResponse:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        try:
            if timeout is None:
                response = await self._client.request(method, path, content=body, headers=headers)
            else:
                response = await self._client.request(
                    method, path, content=body, headers=headers, timeout=timeout
                )
        except httpx.HTTPError as exc:
            log.warning(f"{method} {path} failed without a response: {exc!r}")
            raise TransportError(str(exc) or type(exc).__name__) from exc
        log.debug(f"{method} {path} -> {response.status_code}")
        return TransportResponse(status_code=response.status_code, body=response.content)

    async def list_entries(self, service_id: ServiceId, acl_id: AclId) -> list[ACLEntry]:
        """Fetch every page of the ACL's entries."""

        path = batch_path(service_id, acl_id)
        entries: list[ACLEntry] = []
        seen: set[str] = set()
        page = 1
        while True:
            params = {"page": page, "per_page": self.page_size}
            try:
                response = await self._client.get(path, params=params)
            except httpx.HTTPError as exc:
                raise TransportError(str(exc) or type(exc).__name__) from exc
            if not response.is_success:
                raise RemoteRejected(response.status_code, decode_error_message(response.content))

            try:
                batch = decode_entries(response.content)
            except PayloadValidationError as exc:
                raise TransportError(f"Malformed ACL entry listing from {path}: {exc}") from exc

            fresh = [entry for entry in batch if entry.id not in seen]
            if batch and not fresh:
                log.warning(f"Page {page} of {path} repeated earlier entries; stopping")
                break
            seen.update(entry.id for entry in fresh)
            entries.extend(fresh)
            if len(batch) < self.page_size:
                break
            page += 1

        log.debug(f"Listed {len(entries)} entries for service={service_id} acl={acl_id}")
        return entries


def _with_auth(config: FastlyConfig) -> ResilienceConfig:
    resilience = config.resilience
    headers = dict(resilience.default_headers or {})
    headers[AUTH_HEADER] = config.api_token
    return replace(resilience, base_url=config.base_url, default_headers=headers)
