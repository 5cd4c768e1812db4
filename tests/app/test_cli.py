from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from aclbatch.domain.errors import RemoteRejected
from aclbatch.domain.model import ACLEntry
from aclbatch.ui import cli as cli_module

if TYPE_CHECKING:
    from pathlib import Path

ENTRY = ACLEntry(
    id="entry-1", acl_id="a", service_id="s", ip="10.0.0.0", subnet=8, negated=True, comment="lab"
)


@pytest.fixture
def operations_file(tmp_path: Path) -> Path:
    path = tmp_path / "ops.json"
    path.write_text(json.dumps([{"op": "create", "ip": "10.0.0.0", "subnet": 8}]))
    return path


def test_apply_submits_operations_and_prints_listing(
    monkeypatch: pytest.MonkeyPatch,
    operations_file: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    captured: dict[str, object] = {}

    def fake_modify(service_id: str, acl_id: str, operations: object, **kwargs: object) -> None:
        captured.update(service_id=service_id, acl_id=acl_id, operations=operations, **kwargs)

    monkeypatch.setattr(cli_module, "modify_acl_entries", fake_modify)
    monkeypatch.setattr(cli_module, "list_acl_entries", lambda *_args, **_kw: [ENTRY])

    cli_module.main(
        ["apply", "--service-id", "s", "--acl-id", "a", str(operations_file), "--timeout", "5"]
    )

    assert captured["service_id"] == "s"
    assert captured["acl_id"] == "a"
    assert captured["operations"] == [{"op": "create", "ip": "10.0.0.0", "subnet": 8}]
    assert captured["timeout"] == 5.0
    assert capsys.readouterr().out == "entry-1\t!10.0.0.0/8\tlab\n"


def test_list_prints_entries(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    plain = ACLEntry(id="entry-2", acl_id="a", service_id="s", ip="127.0.0.1")
    monkeypatch.setattr(cli_module, "list_acl_entries", lambda *_args, **_kw: [plain])

    cli_module.main(["list", "--service-id", "s", "--acl-id", "a"])

    assert capsys.readouterr().out == "entry-2\t127.0.0.1\t\n"


def test_invalid_operations_exit_with_usage_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    path = tmp_path / "ops.json"
    path.write_text(json.dumps([{"op": "update", "id": "entry-1"}]))
    monkeypatch.setattr(cli_module, "list_acl_entries", lambda *_args, **_kw: [])

    with pytest.raises(SystemExit) as exc:
        cli_module.main(["apply", "--service-id", "s", "--acl-id", "a", str(path)])

    assert exc.value.code == 2


def test_unreadable_file_exits_with_usage_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        cli_module.main(
            ["apply", "--service-id", "s", "--acl-id", "a", str(tmp_path / "missing.json")]
        )

    assert exc.value.code == 2


def test_remote_failure_exits_with_error(
    monkeypatch: pytest.MonkeyPatch, operations_file: Path
) -> None:
    def fake_modify(*_args: object, **_kwargs: object) -> None:
        raise RemoteRejected(400, "Bad request")

    monkeypatch.setattr(cli_module, "modify_acl_entries", fake_modify)

    with pytest.raises(SystemExit) as exc:
        cli_module.main(["apply", "--service-id", "s", "--acl-id", "a", str(operations_file)])

    assert exc.value.code == 1
