from __future__ import annotations

import json

from aclbatch.domain.batch import build_batch
from aclbatch.domain.model import CreateEntry, UpdateEntry
from aclbatch.wire import batch_path, decode_entries, decode_error_message, encode_batch


def test_encode_batch_omits_unset_fields() -> None:
    request = build_batch(
        "s", "a", [CreateEntry(ip="10.0.0.1"), UpdateEntry(id="e1", comment="", negated=False)]
    )

    payload = json.loads(encode_batch(request))

    assert payload == {
        "entries": [
            {"op": "create", "ip": "10.0.0.1"},
            {"op": "update", "id": "e1", "negated": False, "comment": ""},
        ]
    }


def test_decode_entries_accepts_remote_encodings() -> None:
    body = json.dumps(
        [
            {
                "id": "e1",
                "acl_id": "a",
                "service_id": "s",
                "ip": "192.168.0.1",
                "subnet": "24",
                "negated": "1",
                "comment": None,
                "created_at": "2024-01-01T00:00:00Z",
                "updated_at": "2024-01-02T00:00:00Z",
                "deleted_at": None,
            },
            {
                "id": "e2",
                "acl_id": "a",
                "service_id": "s",
                "ip": "10.0.0.1",
                "subnet": "",
                "negated": False,
            },
        ]
    ).encode()

    first, second = decode_entries(body)

    assert (first.subnet, first.negated, first.comment) == (24, True, "")
    assert first.created_at is not None
    assert first.created_at.year == 2024
    assert (second.subnet, second.negated, second.comment) == (None, False, "")


def test_decode_error_message_variants() -> None:
    assert decode_error_message(b'{"msg": "Bad request", "detail": "nope"}') == "Bad request: nope"
    assert decode_error_message(b'{"msg": "Bad request"}') == "Bad request"
    assert decode_error_message(b"plain failure") == "plain failure"
    assert decode_error_message(b"") == "no response body"
    assert decode_error_message(b"[1, 2]") == "[1, 2]"


def test_batch_path() -> None:
    assert batch_path("svc", "acl") == "/service/svc/acl/acl/entries"
