"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from aclbatch.adapters.fastly import FastlyACLClient
from aclbatch.config import get_fastly_config
from aclbatch.domain.batch import MAX_BATCH_SIZE, build_batch
from aclbatch.domain.reconciliation import fetch_normalized
from aclbatch.submission import submit_async

if TYPE_CHECKING:
    from collections.abc import Iterable

    from aclbatch.config import RetryPolicy
    from aclbatch.domain.batch import BatchModifyACLEntriesRequest
    from aclbatch.domain.model import ACLEntry, AclId, BatchACLEntry, RawBatchEntry, ServiceId

ClientFactory = Callable[[], FastlyACLClient]

log = getLogger(__name__)


def _default_client_factory() -> FastlyACLClient:
    return FastlyACLClient(get_fastly_config())


def modify_acl_entries(
    service_id: ServiceId,
    acl_id: AclId,
    operations: Iterable[BatchACLEntry | RawBatchEntry],
    *,
    client_factory: ClientFactory | None = None,
    retry: RetryPolicy | None = None,
    timeout: float | None = None,
    max_size: int = MAX_BATCH_SIZE,
) -> BatchModifyACLEntriesRequest:
    """Build a batch from ``operations`` and apply it through the configured Fastly client.

    Build errors are raised before a client is created.
    """

    request = build_batch(service_id, acl_id, operations, max_size=max_size)
    factory = client_factory or _default_client_factory
    log.info(
        "Applying %d ACL entry operations: service=%s, acl=%s, creates=%s",
        len(request),
        service_id,
        acl_id,
        request.has_creates,
    )
    asyncio.run(_submit(request, factory, retry=retry, timeout=timeout))
    return request


def list_acl_entries(
    service_id: ServiceId,
    acl_id: AclId,
    *,
    client_factory: ClientFactory | None = None,
) -> list[ACLEntry]:
    """Return the ACL's entries in normalized order."""

    factory = client_factory or _default_client_factory
    return asyncio.run(_list(service_id, acl_id, factory))


async def _submit(
    request: BatchModifyACLEntriesRequest,
    factory: ClientFactory,
    *,
    retry: RetryPolicy | None,
    timeout: float | None,
) -> None:
    async with factory() as client:
        policy = retry or client.config.resilience.retry
        await submit_async(request, client, retry=policy, timeout=timeout)


async def _list(service_id: ServiceId, acl_id: AclId, factory: ClientFactory) -> list[ACLEntry]:
    async with factory() as client:
        return await fetch_normalized(client, service_id, acl_id)
