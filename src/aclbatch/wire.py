"""Pydantic models for the ACL batch API payloads."""

from __future__ import annotations

import json
from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PayloadValidationError

from aclbatch.domain.model import ACLEntry, BatchOperation, to_wire_fields

if TYPE_CHECKING:
    from aclbatch.domain.batch import BatchModifyACLEntriesRequest


class WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class BatchEntryPayload(WireModel):
    op: BatchOperation
    id: str | None = None
    ip: str | None = None
    subnet: int | None = None
    negated: bool | None = None
    comment: str | None = None


class BatchRequestPayload(WireModel):
    entries: list[BatchEntryPayload] = Field(default_factory=list["BatchEntryPayload"])


class ACLEntryPayload(WireModel):
    id: str
    acl_id: str
    service_id: str
    ip: str
    subnet: int | None = None
    negated: bool = False
    comment: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("subnet", mode="before")
    @classmethod
    def _blank_subnet(cls, value: object) -> object:
        if value == "":
            return None
        return value

    def to_domain(self) -> ACLEntry:
        return ACLEntry(
            id=self.id,
            acl_id=self.acl_id,
            service_id=self.service_id,
            ip=self.ip,
            subnet=self.subnet,
            negated=self.negated,
            comment=self.comment or "",
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class ErrorPayload(WireModel):
    msg: str | None = None
    detail: str | None = None


_ENTRY_LIST = TypeAdapter(list[ACLEntryPayload])


def batch_path(service_id: str, acl_id: str) -> str:
    return f"/service/{service_id}/acl/{acl_id}/entries"


def encode_batch(request: BatchModifyACLEntriesRequest) -> bytes:
    """Serialize ``request``; unset fields are omitted rather than sent as null."""

    payload = BatchRequestPayload(
        entries=[BatchEntryPayload.model_validate(to_wire_fields(op)) for op in request.operations]
    )
    return payload.model_dump_json(exclude_none=True).encode("utf-8")


def decode_entries(body: bytes) -> list[ACLEntry]:
    return [payload.to_domain() for payload in _ENTRY_LIST.validate_json(body)]


def decode_error_message(body: bytes) -> str:
    """Best-effort human readable message from an error response body."""

    text = body.decode("utf-8", errors="replace").strip()
    try:
        raw = json.loads(text)
    except json.JSONDecodeError:
        return text or "no response body"
    try:
        error = ErrorPayload.model_validate(raw)
    except PayloadValidationError:
        return text
    parts = [part for part in (error.msg, error.detail) if part]
    return ": ".join(parts) if parts else text
