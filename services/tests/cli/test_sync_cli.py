"""Tests for the sync CLI."""

import json

import pytest

from rolesync.cli.sync import run

STORE_YAML = """\
realms:
  acme:
    roles: [admin]
    users:
      alice: [admin]
"""


@pytest.fixture
def files(tmp_path):
    store = tmp_path / "store.yaml"
    store.write_text(STORE_YAML)
    member = tmp_path / "member.json"
    member.write_text(json.dumps({"resource_access": {"upstream": {"roles": ["admin"]}}}))
    non_member = tmp_path / "non_member.json"
    non_member.write_text(json.dumps({"realm_access": {"roles": ["offline_access"]}}))
    return {"store": str(store), "member": str(member), "non_member": str(non_member)}


def invoke(files, claims, *extra):
    return run(
        [
            "--claims",
            files[claims],
            "--store",
            files["store"],
            "--realm",
            "acme",
            "--external-role",
            "upstream.admin",
            *extra,
        ]
    )


class TestSyncCLI:
    def test_first_login_grant(self, files, capsys):
        code = invoke(files, "member", "--user", "bob", "--role", "admin")
        output = json.loads(capsys.readouterr().out)
        assert code == 0
        assert output["has_external_role"] is True
        assert output["action"] == "grant"
        assert output["applied"] is True
        assert output["roles"] == ["admin"]

    def test_resync_revoke(self, files, capsys):
        code = invoke(
            files, "non_member", "--user", "alice", "--role", "admin", "--event", "resync"
        )
        output = json.loads(capsys.readouterr().out)
        assert code == 0
        assert output["action"] == "revoke"
        assert output["roles"] == []

    def test_legacy_noop(self, files, capsys):
        invoke(
            files, "non_member", "--user", "alice", "--role", "admin", "--event", "legacy-resync"
        )
        output = json.loads(capsys.readouterr().out)
        assert output["action"] == "none"
        assert output["roles"] == ["admin"]

    def test_missing_role_exits_nonzero(self, files, capsys):
        code = invoke(files, "member", "--user", "bob", "--role", "ghost")
        output = json.loads(capsys.readouterr().out)
        assert code == 1
        assert output["error"] == "Unable to find role: ghost"
        assert output["roles"] == []

    def test_invalid_event(self, files):
        with pytest.raises(SystemExit):
            invoke(files, "member", "--user", "bob", "--role", "admin", "--event", "sometimes")

    def test_malformed_claims_reported(self, files, tmp_path, capsys):
        bad = tmp_path / "bad.json"
        bad.write_text("{not json")
        files["bad"] = str(bad)
        code = invoke(files, "bad", "--user", "bob", "--role", "admin")
        output = json.loads(capsys.readouterr().out)
        assert code == 1
        assert output["error"].startswith("Invalid input:")

    def test_store_with_undefined_user_role_reported(self, files, tmp_path, capsys):
        store = tmp_path / "broken.yaml"
        store.write_text("realms:\n  acme:\n    roles: []\n    users:\n      alice: [ghost]\n")
        files["store"] = str(store)
        code = invoke(files, "member", "--user", "alice", "--role", "admin")
        output = json.loads(capsys.readouterr().out)
        assert code == 1
        assert output["error"] == "Invalid input: Unable to find role: ghost"

    def test_missing_claims_file_reported(self, files, tmp_path, capsys):
        files["missing"] = str(tmp_path / "nope.json")
        code = invoke(files, "missing", "--user", "bob", "--role", "admin")
        assert code == 1
        assert "Invalid input" in json.loads(capsys.readouterr().out)["error"]
