"""Batch construction, validation and reconciliation for ACL entries."""

from __future__ import annotations

from .batch import MAX_BATCH_SIZE, BatchModifyACLEntriesRequest, build_batch
from .errors import (
    ACLBatchError,
    BatchTooLarge,
    BuildError,
    Cancelled,
    DuplicateTarget,
    EmptyBatch,
    EmptyUpdate,
    ForbiddenField,
    InvalidAddress,
    InvalidFieldType,
    InvalidOperation,
    InvalidSubnet,
    MissingRequiredField,
    RemoteRejected,
    SubmissionError,
    TransportError,
    TransportFailure,
    UnknownOperation,
    ValidationError,
)
from .model import (
    ACLEntry,
    BatchACLEntry,
    BatchOperation,
    CreateEntry,
    DeleteEntry,
    UpdateEntry,
    fields_present,
)
from .ports import ACLEntryLister, Transport, TransportResponse
from .reconciliation import entry_fingerprint, fetch_normalized, normalize
from .validation import validate

__all__ = [
    "MAX_BATCH_SIZE",
    "ACLBatchError",
    "ACLEntry",
    "ACLEntryLister",
    "BatchACLEntry",
    "BatchModifyACLEntriesRequest",
    "BatchOperation",
    "BatchTooLarge",
    "BuildError",
    "Cancelled",
    "CreateEntry",
    "DeleteEntry",
    "DuplicateTarget",
    "EmptyBatch",
    "EmptyUpdate",
    "ForbiddenField",
    "InvalidAddress",
    "InvalidFieldType",
    "InvalidOperation",
    "InvalidSubnet",
    "MissingRequiredField",
    "RemoteRejected",
    "SubmissionError",
    "Transport",
    "TransportError",
    "TransportFailure",
    "TransportResponse",
    "UnknownOperation",
    "UpdateEntry",
    "ValidationError",
    "build_batch",
    "entry_fingerprint",
    "fetch_normalized",
    "fields_present",
    "normalize",
    "validate",
]
