"""Tests for the renderer module."""

import json

from ctx_treemap.models import SessionSnapshot
from ctx_treemap.renderer import (
    clip,
    compute_metadata,
    forest,
    format_value,
    json_for_html,
    render,
    render_json,
    tree_to_dict,
)
from ctx_treemap.tree import build_tree, leaf_total


class TestFormatValue:
    """Tests for format_value function."""

    def test_plain(self) -> None:
        assert format_value(0) == "0 chars"
        assert format_value(999) == "999 chars"

    def test_thousands(self) -> None:
        assert format_value(1000) == "1.0K chars"
        assert format_value(1500) == "1.5K chars"

    def test_millions(self) -> None:
        assert format_value(2_300_000) == "2.3M chars"


class TestJsonForHtml:
    """Tests for json_for_html function."""

    def test_simple_dict(self) -> None:
        """Simple dict is serialized correctly."""
        result = json_for_html({"key": "value"})
        assert result == '{"key": "value"}'

    def test_escapes_script_tag(self) -> None:
        """Script tags are escaped."""
        result = json_for_html({"text": "</script>"})
        assert "</script>" not in result
        assert "scr\\u0069pt" in result

    def test_escapes_html_comment(self) -> None:
        """HTML comments are escaped."""
        result = json_for_html({"text": "<!--comment-->"})
        assert "<!--" not in result
        assert "<\\u0021--" in result


class TestTreeToDict:
    """Tests for the renderer-facing tree shape."""

    def test_camel_case_keys(self, demo_snapshot: SessionSnapshot) -> None:
        root, _ = build_tree(demo_snapshot)
        data = tree_to_dict(root)
        message = data["children"][0]
        leaf = message["children"][0]
        assert message["colorType"] == "user"
        assert leaf["leafKey"] == "0-0"
        assert "leaf_key" not in leaf
        assert "children" not in leaf

    def test_forest(self, demo_snapshot: SessionSnapshot) -> None:
        root, _ = build_tree(demo_snapshot)
        nodes = forest(root, "Fix login bug")
        assert nodes[0]["name"] == "Fix login bug"
        assert nodes[0]["data"]["name"] == "session"


class TestRenderJson:
    """Tests for render_json and compute_metadata."""

    def test_metadata(self, demo_snapshot: SessionSnapshot) -> None:
        root, _ = build_tree(demo_snapshot)
        meta = compute_metadata(root, "ses_demo")
        assert meta["session_id"] == "ses_demo"
        assert meta["messages"] == 2
        assert meta["parts"] == 10

    def test_metadata_first(self, demo_snapshot: SessionSnapshot) -> None:
        root, _ = build_tree(demo_snapshot)
        data = json.loads(render_json(root, "ses_demo"))
        assert list(data) == ["metadata", "palette", "nodes"]

    def test_compact(self, demo_snapshot: SessionSnapshot) -> None:
        root, _ = build_tree(demo_snapshot)
        assert "\n" not in render_json(root, compact=True)


class TestRender:
    """Tests for render function."""

    def test_renders_html(self, demo_snapshot: SessionSnapshot) -> None:
        """Render produces valid HTML."""
        root, index = build_tree(demo_snapshot)
        html = render(root, index, title="Fix login bug")
        assert "<!DOCTYPE html>" in html
        assert "</html>" in html
        assert "Fix login bug" in html

    def test_includes_tree_and_details(self, demo_snapshot: SessionSnapshot) -> None:
        root, index = build_tree(demo_snapshot)
        html = render(root, index)
        assert "const data =" in html
        assert '"leafKey"' in html
        assert "=== TOOL: read ===" in html
        assert "function squarify" in html

    def test_escapes_title(self, demo_snapshot: SessionSnapshot) -> None:
        root, index = build_tree(demo_snapshot)
        html = render(root, index, title="<b>x</b>")
        assert "<title><b>" not in html
        assert "&lt;b&gt;x&lt;/b&gt;" in html

    def test_clips_long_details(self, demo_snapshot: SessionSnapshot) -> None:
        """Large parts are cut short in the page but keep their full size."""
        root, index = build_tree(demo_snapshot)
        html = render(root, index, detail_limit=10)
        assert "more; open the part with" in html
        assert "Why does login fail?" not in html
        assert format_value(leaf_total(root)) in html

    def test_empty_session(self) -> None:
        """Empty session renders without error."""
        root, index = build_tree(SessionSnapshot())
        html = render(root, index)
        assert "<!DOCTYPE html>" in html
        assert "0 chars" in html


class TestClip:
    """Tests for clip function."""

    def test_short_text_untouched(self) -> None:
        assert clip("abc", 3) == "abc"

    def test_long_text_notes_remainder(self) -> None:
        clipped = clip("x" * 1500, 100)
        assert clipped.startswith("x" * 100 + "\n\n")
        assert "1.4K chars more" in clipped
