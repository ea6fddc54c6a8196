"""Unit tests for the parser module."""

from pathlib import Path

import pytest

from ctx_treemap.models import FilePart, Role, ToolPart, UnknownPart
from ctx_treemap.parser import load_records, parse_export, parse_messages


class TestLoadRecords:
    """Tests for load_records function."""

    def test_empty_file(self, tmp_path: Path) -> None:
        """Empty file returns empty list."""
        f = tmp_path / "empty.jsonl"
        f.write_text("")
        assert load_records(f) == []

    def test_skips_malformed_json(self, jsonl_file: Path, capsys: pytest.CaptureFixture) -> None:
        """Malformed JSON lines are skipped with warning."""
        records = load_records(jsonl_file)
        assert len(records) == 2
        captured = capsys.readouterr()
        assert "Warning: Skipping malformed JSON at line 2" in captured.err


class TestParseMessages:
    """Tests for parse_messages function."""

    def test_skips_invalid_messages(self, capsys: pytest.CaptureFixture) -> None:
        records = [
            {"info": {"role": "user"}, "parts": []},
            {"info": {"role": "robot"}, "parts": []},
        ]
        messages = parse_messages(records)
        assert len(messages) == 1
        assert "Warning: Skipping message 1" in capsys.readouterr().err


class TestParseExport:
    """Tests for parse_export function."""

    def test_export_document(self, export_file: Path) -> None:
        snapshot = parse_export(export_file)
        assert snapshot.info is not None
        assert snapshot.info.title == "Fix login bug"
        assert snapshot.directory == "/proj"
        assert [m.info.role for m in snapshot.messages] == [Role.USER, Role.ASSISTANT]

    def test_part_variants(self, export_file: Path) -> None:
        """Parts are parsed into their own types, unknown kinds included."""
        snapshot = parse_export(export_file)
        user, assistant = snapshot.messages
        assert isinstance(user.parts[1], FilePart)
        assert isinstance(assistant.parts[2], ToolPart)
        assert assistant.parts[3].state.compacted
        assert not assistant.parts[2].state.compacted
        assert isinstance(assistant.parts[7], UnknownPart)
        assert assistant.parts[7].type == "mystery"

    def test_jsonl(self, jsonl_file: Path) -> None:
        snapshot = parse_export(jsonl_file)
        assert snapshot.info is None
        assert snapshot.directory == ""
        assert len(snapshot.messages) == 2

    def test_bare_list(self, tmp_path: Path) -> None:
        f = tmp_path / "messages.json"
        f.write_text('[{"info": {"role": "user"}, "parts": [{"type": "text", "text": "hi"}]}]')
        snapshot = parse_export(f)
        assert len(snapshot.messages) == 1

    def test_empty_file(self, tmp_path: Path) -> None:
        f = tmp_path / "empty.json"
        f.write_text("  \n")
        assert parse_export(f).messages == []

    def test_not_a_session(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        f = tmp_path / "number.json"
        f.write_text("42")
        assert parse_export(f).messages == []
        assert "Warning" in capsys.readouterr().err

    def test_missing_directory(self, tmp_path: Path) -> None:
        """Sessions without a directory relativize nothing."""
        f = tmp_path / "s.json"
        f.write_text('{"info": {"id": "ses_x"}, "messages": []}')
        snapshot = parse_export(f)
        assert snapshot.info is not None
        assert snapshot.directory == ""
