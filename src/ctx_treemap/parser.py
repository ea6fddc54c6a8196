"""Loads session snapshots from files for offline viewing."""

import json
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .models import Message, SessionInfo, SessionSnapshot


def load_records(path: Path) -> list[dict]:
    """Load JSONL, one message per line; malformed lines are skipped."""
    records = []
    with open(path) as f:
        for line_num, line in enumerate(f, 1):
            if not line.strip():
                continue
            try:
                rec = json.loads(line)
            except json.JSONDecodeError as e:
                print(f"Warning: Skipping malformed JSON at line {line_num}: {e}", file=sys.stderr)
                continue
            if isinstance(rec, dict):
                records.append(rec)
    return records


def parse_messages(records: list[Any]) -> list[Message]:
    """Validate raw message records, dropping the ones that don't fit."""
    messages = []
    for i, rec in enumerate(records):
        try:
            messages.append(Message.model_validate(rec))
        except ValidationError as e:
            count = e.error_count()
            print(f"Warning: Skipping message {i}: {count} validation error(s)", file=sys.stderr)
    return messages


def parse_export(path: Path) -> SessionSnapshot:
    """Main entry point: export file -> SessionSnapshot.

    Accepts the output of ``opencode export <id>`` (``{"info", "messages"}``),
    a bare JSON list of messages, or JSONL with one message per line.
    """
    text = path.read_text()
    if not text.strip():
        return SessionSnapshot()

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return SessionSnapshot(messages=parse_messages(load_records(path)))

    if isinstance(data, list):
        return SessionSnapshot(messages=parse_messages(data))
    if not isinstance(data, dict):
        print("Warning: Export file holds no session", file=sys.stderr)
        return SessionSnapshot()

    info = None
    if isinstance(data.get("info"), dict):
        try:
            info = SessionInfo.model_validate(data["info"])
        except ValidationError:
            print("Warning: Ignoring unreadable session info", file=sys.stderr)
    return SessionSnapshot(info=info, messages=parse_messages(data.get("messages", [])))
