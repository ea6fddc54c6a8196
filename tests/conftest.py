"""Pytest configuration and fixtures."""

from collections.abc import Callable
from pathlib import Path

import pytest

from ctx_treemap.models import Message, MessageInfo, SessionInfo, SessionSnapshot
from ctx_treemap.parser import parse_export


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the fixtures directory path."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def export_file(fixtures_dir: Path) -> Path:
    """Return path to export.json fixture."""
    return fixtures_dir / "export.json"


@pytest.fixture
def jsonl_file(fixtures_dir: Path) -> Path:
    """Return path to messages.jsonl fixture."""
    return fixtures_dir / "messages.jsonl"


@pytest.fixture
def demo_snapshot(export_file: Path) -> SessionSnapshot:
    """The export.json session, parsed."""
    return parse_export(export_file)


@pytest.fixture
def make_snapshot() -> Callable[..., SessionSnapshot]:
    """Build a snapshot from (role, parts) pairs."""

    def _make(*messages: tuple[str, list], directory: str | None = None) -> SessionSnapshot:
        return SessionSnapshot(
            info=SessionInfo(id="ses_test", directory=directory),
            messages=[Message(info=MessageInfo(role=role), parts=parts) for role, parts in messages],
        )

    return _make
