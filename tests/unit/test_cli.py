"""Unit tests for the operator CLI (bizknowledge.cli.manage)."""

from __future__ import annotations

from pathlib import Path

import pytest

from bizknowledge.cli.manage import _build_parser, main


@pytest.fixture(autouse=True)
def offline_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the CLI at a temp database with generation switched off."""
    db_path = tmp_path / "cli.db"
    monkeypatch.setenv("DATABASE_PATH", str(db_path))
    monkeypatch.setenv("GENERATION_ENABLED", "false")
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "absent.yaml"))
    return db_path


def _run(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestParser:
    def test_ingest_requires_a_source(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["ingest", "--title", "X"])

    def test_ingest_sources_are_exclusive(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["ingest", "--title", "X", "--text", "a", "--file", "b"])

    def test_search_defaults(self) -> None:
        args = _build_parser().parse_args(["search", "--query", "budget"])
        assert args.limit == 10


def test_no_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    assert _run([]) == 1
    assert "usage" in capsys.readouterr().out.lower()


def test_ingest_text_then_list(capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["ingest", "--title", "Q3 Budget", "--text", "Marketing receives 25 percent."]) == 0
    out = capsys.readouterr().out
    assert "Ingestion complete" in out
    assert "General" in out

    assert _run(["documents"]) == 0
    assert "Q3 Budget" in capsys.readouterr().out

    assert _run(["segments"]) == 0
    segments_out = capsys.readouterr().out
    assert "General" in segments_out
    assert "Finance" in segments_out


def test_ingest_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "policy.txt"
    path.write_text("Staff get 25 days of annual leave.", encoding="utf-8")

    assert _run(["ingest", "--title", "Leave Policy", "--file", str(path)]) == 0
    assert "Document ID" in capsys.readouterr().out

    assert _run(["search", "--query", "ANNUAL"]) == 0
    assert "Leave Policy" in capsys.readouterr().out


def test_ingest_missing_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["ingest", "--title", "Ghost", "--file", str(tmp_path / "nope.txt")]) == 1
    assert "file not found" in capsys.readouterr().err


def test_ingest_unsupported_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "archive.zip"
    path.write_bytes(b"PK\x03\x04")

    assert _run(["ingest", "--title", "Zip", "--file", str(path)]) == 1
    err = capsys.readouterr().err
    assert "not supported" in err
    assert "Supported formats" in err


def test_delete_unknown_document(capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["delete", "--id", "999"]) == 1
    assert "not found" in capsys.readouterr().err


def test_delete_then_recount(capsys: pytest.CaptureFixture[str]) -> None:
    _run(["ingest", "--title", "Memo", "--text", "A short memo."])
    capsys.readouterr()

    assert _run(["delete", "--id", "1"]) == 0
    assert "Deleted document 1" in capsys.readouterr().out

    assert _run(["recount"]) == 0
    out = capsys.readouterr().out
    assert "Segment counts repaired" in out


def test_search_without_hits(capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(["search", "--query", "nothing"]) == 0
    assert "No matching chunks" in capsys.readouterr().out
