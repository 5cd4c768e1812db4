"""Error taxonomy for building and submitting ACL entry batches.

Every failure is raised as a typed exception carrying structured context so callers can
present an actionable message. ``ValidationError`` and ``BuildError`` are raised before any
network activity; ``SubmissionError`` is raised by the executor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class ACLBatchError(Exception):
    """Base class for every error raised by this package."""


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ValidationError(ACLBatchError):
    """A single batch operation violates its field contract."""


class MissingRequiredField(ValidationError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required field: {field}")
        self.field = field


class ForbiddenField(ValidationError):
    def __init__(self, field: str, *, operation: str | None = None) -> None:
        suffix = f" for {operation} operations" if operation else ""
        super().__init__(f"Field not allowed{suffix}: {field}")
        self.field = field
        self.operation = operation


class InvalidSubnet(ValidationError):
    def __init__(self, subnet: object, *, ip: str | None = None, maximum: int = 128) -> None:
        target = f" for {ip}" if ip else ""
        super().__init__(f"Invalid subnet {subnet!r}{target}: expected 0..{maximum}")
        self.subnet = subnet
        self.ip = ip
        self.maximum = maximum


class InvalidAddress(ValidationError):
    def __init__(self, ip: object) -> None:
        super().__init__(f"Not an IPv4 or IPv6 address: {ip!r}")
        self.ip = ip


class InvalidFieldType(ValidationError):
    def __init__(self, field: str, expected: str, value: object) -> None:
        super().__init__(f"Field {field} must be {expected}, got {type(value).__name__}")
        self.field = field
        self.expected = expected
        self.value = value


class EmptyUpdate(ValidationError):
    def __init__(self, entry_id: str | None = None) -> None:
        super().__init__(f"Update for entry {entry_id!r} does not change any field")
        self.entry_id = entry_id


class UnknownOperation(ValidationError):
    def __init__(self, tag: object) -> None:
        super().__init__(f"Unknown batch operation: {tag!r}")
        self.tag = tag


# ---------------------------------------------------------------------------
# Batch construction
# ---------------------------------------------------------------------------


class BuildError(ACLBatchError):
    """A batch could not be assembled; nothing was sent."""


class EmptyBatch(BuildError):
    def __init__(self) -> None:
        super().__init__("A batch needs at least one operation")


class BatchTooLarge(BuildError):
    def __init__(self, actual: int, maximum: int) -> None:
        super().__init__(f"Batch has {actual} operations, the maximum is {maximum}")
        self.actual = actual
        self.maximum = maximum


class InvalidOperation(BuildError):
    def __init__(self, index: int, error: ValidationError) -> None:
        super().__init__(f"Operation #{index} is invalid: {error}")
        self.index = index
        self.error = error


class DuplicateTarget(BuildError):
    def __init__(self, entry_id: str, indexes: Sequence[int]) -> None:
        positions = ", ".join(f"#{index}" for index in indexes)
        super().__init__(f"Entry {entry_id!r} is targeted more than once ({positions})")
        self.entry_id = entry_id
        self.indexes = tuple(indexes)


# ---------------------------------------------------------------------------
# Transport and submission
# ---------------------------------------------------------------------------


class TransportError(ACLBatchError):
    """Raised by Transport/Lister collaborators when no response was obtained."""


class Cancelled(TransportError):
    """The caller cancelled, or its deadline expired, before a response was observed."""

    def __init__(self, message: str = "Cancelled before a response was observed") -> None:
        super().__init__(message)


class SubmissionError(ACLBatchError):
    """The batch was built but the remote call did not succeed."""


class RemoteRejected(SubmissionError):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Remote rejected batch with status {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class TransportFailure(SubmissionError):
    def __init__(self, cause: TransportError) -> None:
        super().__init__(f"Transport failure: {cause}")
        self.cause = cause

    @property
    def cancelled(self) -> bool:
        return isinstance(self.cause, Cancelled)
