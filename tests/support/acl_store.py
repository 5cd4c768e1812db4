"""In-memory ACL service that applies batches transactionally, for tests."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import httpx

from aclbatch.domain.errors import TransportError
from aclbatch.domain.model import ACLEntry
from aclbatch.domain.ports import TransportResponse

if TYPE_CHECKING:
    from collections.abc import Iterable

_PATH = re.compile(r"^/service/(?P<service_id>[^/]+)/acl/(?P<acl_id>[^/]+)/entries$")


class _Rejected(Exception):
    def __init__(self, status_code: int, msg: str, detail: str) -> None:
        super().__init__(msg)
        self.status_code = status_code
        self.msg = msg
        self.detail = detail


@dataclass
class InMemoryACLStore:
    """Plays the remote ACL service: one PATCH applies every operation or none."""

    service_id: str = "service-1"
    acl_id: str = "acl-1"
    entries: dict[str, ACLEntry] = field(default_factory=dict)
    calls: list[tuple[str, str, bytes]] = field(default_factory=list)
    _next_id: int = 1

    def seed(self, *entries: tuple[str, int | None, bool, str]) -> list[ACLEntry]:
        created: list[ACLEntry] = []
        for ip, subnet, negated, comment in entries:
            entry = ACLEntry(
                id=self._issue_id(),
                acl_id=self.acl_id,
                service_id=self.service_id,
                ip=ip,
                subnet=subnet,
                negated=negated,
                comment=comment,
            )
            self.entries[entry.id] = entry
            created.append(entry)
        return created

    # Transport
    async def send(
        self,
        method: str,
        path: str,
        body: bytes,
        *,
        timeout: float | None = None,
    ) -> TransportResponse:
        del timeout
        self.calls.append((method, path, body))
        status, payload = self.handle(method, path, body)
        return TransportResponse(status_code=status, body=payload)

    # Lister
    async def list_entries(self, service_id: str, acl_id: str) -> list[ACLEntry]:
        if (service_id, acl_id) != (self.service_id, self.acl_id):
            raise TransportError("unknown ACL")
        return self.snapshot()

    def snapshot(self) -> list[ACLEntry]:
        # Newest first, so callers cannot rely on insertion order.
        return list(reversed(self.entries.values()))

    def handle(self, method: str, path: str, body: bytes) -> tuple[int, bytes]:
        match = _PATH.match(path)
        if match is None or (match["service_id"], match["acl_id"]) != (
            self.service_id,
            self.acl_id,
        ):
            return 404, _error("Record not found", f"No ACL at {path}")
        if method != "PATCH":
            return 405, _error("Method not allowed", method)
        try:
            self.entries = self._apply(json.loads(body)["entries"])
        except _Rejected as exc:
            return exc.status_code, _error(exc.msg, exc.detail)
        return 200, json.dumps({"status": "ok"}).encode()

    def httpx_handler(self, request: httpx.Request) -> httpx.Response:
        """Route an httpx request the way the Fastly API would."""

        path = request.url.path
        if request.method == "GET":
            match = _PATH.match(path)
            if match is None or match["acl_id"] != self.acl_id:
                return httpx.Response(404, content=_error("Record not found", path))
            page = int(request.url.params.get("page", "1"))
            per_page = int(request.url.params.get("per_page", "100"))
            window = self.snapshot()[(page - 1) * per_page : page * per_page]
            return httpx.Response(200, json=[_entry_json(entry) for entry in window])
        status, payload = self.handle(request.method, path, request.content)
        return httpx.Response(status, content=payload)

    def _apply(self, operations: Iterable[dict[str, object]]) -> dict[str, ACLEntry]:
        working = dict(self.entries)
        for op in operations:
            kind = op["op"]
            if kind == "create":
                entry = ACLEntry(
                    id=self._issue_id(),
                    acl_id=self.acl_id,
                    service_id=self.service_id,
                    ip=str(op["ip"]),
                    subnet=op.get("subnet"),  # pyright: ignore[reportArgumentType]
                    negated=bool(op.get("negated", False)),
                    comment=str(op.get("comment", "")),
                )
                working[entry.id] = entry
                continue
            target = str(op["id"])
            if target not in working:
                raise _Rejected(400, "Bad request", f"ACL entry {target} not found")
            if kind == "delete":
                del working[target]
                continue
            changes = {
                name: op[name] for name in ("ip", "subnet", "negated", "comment") if name in op
            }
            working[target] = replace(working[target], **changes)  # pyright: ignore[reportArgumentType]
        return working

    def _issue_id(self) -> str:
        issued = f"entry-{self._next_id:04d}"
        self._next_id += 1
        return issued


def _error(msg: str, detail: str) -> bytes:
    return json.dumps({"msg": msg, "detail": detail}).encode()


def _entry_json(entry: ACLEntry) -> dict[str, object]:
    stamp = datetime(2024, 1, 1, tzinfo=UTC).isoformat()
    return {
        "id": entry.id,
        "acl_id": entry.acl_id,
        "service_id": entry.service_id,
        "ip": entry.ip,
        "subnet": entry.subnet,
        "negated": "1" if entry.negated else "0",
        "comment": entry.comment,
        "created_at": stamp,
        "updated_at": stamp,
        "deleted_at": None,
    }


class FailingTransport:
    """Raises ``TransportError`` a fixed number of times, then defers to ``inner``."""

    def __init__(self, inner: InMemoryACLStore, *, failures: int) -> None:
        self.inner = inner
        self.failures = failures
        self.attempts = 0

    async def send(
        self,
        method: str,
        path: str,
        body: bytes,
        *,
        timeout: float | None = None,
    ) -> TransportResponse:
        self.attempts += 1
        if self.attempts <= self.failures:
            raise TransportError("connection reset by peer")
        return await self.inner.send(method, path, body, timeout=timeout)
