"""Submit a built batch through a Transport and classify the outcome.

A submission either applies every operation or none of them. When the outcome is ambiguous
(no response observed), a batch containing creates is never resent automatically: the
caller has to list the remote state first, since resending a create duplicates the entry.
"""

from __future__ import annotations

import asyncio
from contextlib import suppress
from logging import getLogger
from typing import TYPE_CHECKING

from aclbatch.adapters.http_resilience import build_retry
from aclbatch.config.http_resilience import NO_RETRY
from aclbatch.domain.errors import Cancelled, RemoteRejected, TransportError, TransportFailure
from aclbatch.wire import batch_path, decode_error_message, encode_batch

if TYPE_CHECKING:
    from aclbatch.config.http_resilience import RetryPolicy
    from aclbatch.domain.batch import BatchModifyACLEntriesRequest
    from aclbatch.domain.ports import Transport, TransportResponse

log = getLogger(__name__)

BATCH_METHOD = "PATCH"


async def submit_async(
    request: BatchModifyACLEntriesRequest,
    transport: Transport,
    *,
    retry: RetryPolicy = NO_RETRY,
    timeout: float | None = None,
    cancel: asyncio.Event | None = None,
) -> None:
    """Send ``request`` once, retrying transport failures only when every operation is idempotent.

    ``timeout`` is an overall deadline in seconds covering every attempt and backoff.
    Setting ``cancel`` or reaching the deadline before a response is observed raises
    ``TransportFailure`` whose cause is ``Cancelled``. Non-2xx responses raise
    ``RemoteRejected`` and are never retried.
    """

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout if timeout is not None else None
    body = encode_batch(request)
    path = batch_path(request.service_id, request.acl_id)
    retry_state = build_retry(retry if request.is_idempotent else NO_RETRY)
    attempt = 0

    while True:
        attempt += 1
        log.info(f"Submitting batch of {len(request)} operations to {path} (attempt {attempt})")
        try:
            response = await _send_once(transport, path, body, deadline=deadline, cancel=cancel)
        except Cancelled as exc:
            log.warning(f"Batch submission to {path} cancelled: {exc}")
            raise TransportFailure(exc) from exc
        except TransportError as exc:
            if retry_state.is_exhausted():
                if request.has_creates:
                    log.warning(
                        f"Batch to {path} contains creates; not retrying after transport "
                        f"failure, list remote state before resubmitting"
                    )
                raise TransportFailure(exc) from exc
            retry_state = retry_state.increment()
            delay = retry_state.backoff_strategy()
            log.warning(f"Transport failure on {path}: {exc}; retrying in {delay:.2f}s")
            await _sleep(delay, deadline=deadline, cancel=cancel)
            continue

        if not response.is_success:
            message = decode_error_message(response.body)
            log.error(f"Remote rejected batch to {path}: {response.status_code} {message}")
            raise RemoteRejected(response.status_code, message)

        log.info(f"Batch of {len(request)} operations applied to {path}")
        return


def submit(
    request: BatchModifyACLEntriesRequest,
    transport: Transport,
    *,
    retry: RetryPolicy = NO_RETRY,
    timeout: float | None = None,
) -> None:
    """Blocking wrapper around ``submit_async``."""

    asyncio.run(submit_async(request, transport, retry=retry, timeout=timeout))


async def _send_once(
    transport: Transport,
    path: str,
    body: bytes,
    *,
    deadline: float | None,
    cancel: asyncio.Event | None,
) -> TransportResponse:
    remaining = _remaining(deadline)
    if remaining is not None and remaining <= 0:
        raise Cancelled("Deadline expired before the batch was sent")
    if cancel is not None and cancel.is_set():
        raise Cancelled

    send = asyncio.ensure_future(transport.send(BATCH_METHOD, path, body, timeout=remaining))
    waiters: set[asyncio.Future[object]] = {send}
    cancel_wait: asyncio.Future[object] | None = None
    if cancel is not None:
        cancel_wait = asyncio.ensure_future(cancel.wait())
        waiters.add(cancel_wait)

    try:
        done, _ = await asyncio.wait(
            waiters, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        await _cancel_pending(waiters)

    if send not in done:
        if cancel_wait is not None and cancel_wait in done:
            raise Cancelled
        raise Cancelled("Deadline expired before a response was observed")
    try:
        return send.result()
    except TransportError as exc:
        remaining = _remaining(deadline)
        if remaining is not None and remaining <= 0:
            raise Cancelled("Deadline expired before a response was observed") from exc
        raise


async def _sleep(delay: float, *, deadline: float | None, cancel: asyncio.Event | None) -> None:
    remaining = _remaining(deadline)
    if remaining is not None and delay >= remaining:
        raise TransportFailure(Cancelled("Deadline expired while waiting to retry"))
    if cancel is None:
        await asyncio.sleep(delay)
        return
    with suppress(TimeoutError):
        await asyncio.wait_for(cancel.wait(), timeout=delay)
        raise TransportFailure(Cancelled())


async def _cancel_pending(futures: set[asyncio.Future[object]]) -> None:
    pending = [future for future in futures if not future.done()]
    for future in pending:
        future.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)


def _remaining(deadline: float | None) -> float | None:
    if deadline is None:
        return None
    return deadline - asyncio.get_running_loop().time()

