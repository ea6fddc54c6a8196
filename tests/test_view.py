"""Tests for the terminal view."""

import pytest
import typer
from typer.testing import CliRunner

from ctx_treemap.models import SessionSnapshot, TreeNode
from ctx_treemap.view import Mode, SessionView, boundary, hex_to_rgb, outline, run


@pytest.fixture
def view(demo_snapshot: SessionSnapshot) -> SessionView:
    return SessionView.from_snapshot(demo_snapshot)


class TestSessionView:
    """Tests for selection state."""

    def test_title_from_session(self, view: SessionView) -> None:
        assert view.title == "Fix login bug"
        assert view.mode == Mode.TREEMAP

    def test_select_materializes_detail(self, view: SessionView) -> None:
        detail = view.select("0-0")
        assert view.mode == Mode.DETAIL
        assert view.selected == "0-0"
        assert "Why does login fail?" in detail

    def test_back_keeps_tree_and_index(self, view: SessionView) -> None:
        """Selecting then going back leaves the model untouched."""
        before = view.root.model_dump()
        keys = view.index.keys()
        view.select_number(3)
        view.back()
        assert view.mode == Mode.TREEMAP
        assert view.selected is None
        assert view.detail is None
        assert view.root.model_dump() == before
        assert view.index.keys() == keys

    def test_unknown_leaf(self, view: SessionView) -> None:
        with pytest.raises(KeyError):
            view.select("99-0")
        assert view.mode == Mode.TREEMAP

    def test_leaf_without_key(self, view: SessionView) -> None:
        """A leaf built without validation cannot be selected."""
        view.leaves = [TreeNode.model_construct(name="orphan", value=1, children=None)]
        with pytest.raises(KeyError, match="orphan"):
            view.select_number(1)
        assert view.mode == Mode.TREEMAP


class TestOutline:
    """Tests for the text treemap."""

    def test_numbers_every_leaf(self, view: SessionView) -> None:
        lines = outline(view, width=60, color=False)
        assert lines[0].startswith("Fix login bug")
        assert "(10 parts)" in lines[0]
        assert any(line.strip().startswith("10 ") for line in lines)
        assert any("tool:read:src/auth.ts" in line for line in lines)

    def test_empty_session(self) -> None:
        lines = outline(SessionView.from_snapshot(SessionSnapshot()), color=False)
        assert "0 chars" in lines[0]

    def test_hex_to_rgb(self) -> None:
        assert hex_to_rgb("#ff8000") == (255, 128, 0)


class TestBoundary:
    """Tests for the render error boundary."""

    def test_passes_through(self) -> None:
        assert boundary(lambda: ["ok"]) == ["ok"]

    def test_failure_becomes_panel(self) -> None:
        def broken() -> list[str]:
            raise RuntimeError("layout exploded")

        lines = boundary(broken)
        assert "layout exploded" in lines[0]
        assert "RuntimeError" in lines[1]


class TestRun:
    """Tests for the interactive loop."""

    def _invoke(self, view: SessionView, keys: str, can_switch: bool = False) -> tuple[str, list]:
        result: list = []
        app = typer.Typer()

        @app.command()
        def main() -> None:
            result.append(run(view, width=60, can_switch=can_switch))

        out = CliRunner().invoke(app, [], input=keys)
        assert out.exit_code == 0, out.output
        return out.output, result

    def test_select_then_quit(self, view: SessionView) -> None:
        output, result = self._invoke(view, "1\n\nq\n")
        assert "Why does login fail?" in output
        assert result == [False]
        assert view.mode == Mode.TREEMAP

    def test_bad_input(self, view: SessionView) -> None:
        output, _ = self._invoke(view, "abc\n42\nq\n")
        assert "No leaf 'abc'" in output
        assert "No leaf '42'" in output

    def test_switch(self, view: SessionView) -> None:
        _, result = self._invoke(view, "s\n", can_switch=True)
        assert result == [True]

    def test_detail_returns_to_treemap(self, view: SessionView) -> None:
        """After reading a part the treemap is drawn again."""
        output, result = self._invoke(view, "1\n\n2\n\nq\n")
        assert "Why does login fail?" in output
        assert output.count("(10 parts)") == 3
        assert result == [False]

