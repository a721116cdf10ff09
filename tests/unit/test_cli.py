import json

import pytest

from ftms import cli


@pytest.fixture
def run_cli(settings, monkeypatch):
    monkeypatch.setattr(cli, "get_settings", lambda: settings)

    def invoke(*argv):
        return cli.main(list(argv))

    return invoke


def test_upload_get_and_search(run_cli, tmp_path, capsys):
    source = tmp_path / "minutes.md"
    source.write_text("# Minutes\nThe roadmap was approved.\n", encoding="utf-8")

    assert run_cli("upload", str(source), "--session", "s9", "--tags", "board") == 0
    record = json.loads(capsys.readouterr().out)
    assert record["filename"] == "minutes.md"
    assert record["mime_type"] == "text/markdown"
    assert record["session_id"] == "s9"

    assert run_cli("get", record["id"]) == 0
    assert json.loads(capsys.readouterr().out)["id"] == record["id"]

    assert run_cli("search", "roadmap") == 0
    results = json.loads(capsys.readouterr().out)
    assert [result["file"]["id"] for result in results] == [record["id"]]

    assert run_cli("list", "--session", "s9") == 0
    assert json.loads(capsys.readouterr().out)["total"] == 1


def test_get_unknown_id_fails(run_cli):
    assert run_cli("get", "nope") == 1


def test_malformed_search_exits_nonzero(run_cli):
    assert run_cli("search", '"unterminated') == 1


def test_cat_writes_stored_bytes(run_cli, tmp_path, capsysbinary):
    source = tmp_path / "blob.bin"
    source.write_bytes(b"\x00\x01binary")
    assert run_cli("upload", str(source)) == 0
    record = json.loads(capsysbinary.readouterr().out)

    assert run_cli("cat", record["id"]) == 0
    assert capsysbinary.readouterr().out == b"\x00\x01binary"


def test_upload_of_missing_path_exits_nonzero(run_cli, tmp_path):
    assert run_cli("upload", str(tmp_path / "does-not-exist.txt")) == 1


@pytest.mark.parametrize("flag", ["--limit", "--offset"])
def test_negative_list_bounds_exit_nonzero(run_cli, flag):
    assert run_cli("list", flag, "-1") == 1
