"""HTML and JSON renderers for the session treemap."""

import json
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader

from .config import HTML_DETAIL_LIMIT, PALETTE
from .content import part_content
from .models import TreeNode
from .tree import PartIndex, iter_leaves, leaf_total


def format_value(chars: int | float) -> str:
    """Human-readable character count: '999 chars', '1.5K chars', '2.3M chars'."""
    if chars < 1000:
        return f"{chars} chars"
    k = chars / 1000
    if k < 1000:
        return f"{k:.1f}K chars"
    return f"{k / 1000:.1f}M chars"


def json_for_html(data: Any) -> str:
    """Safely encode JSON for embedding in HTML script tags."""
    json_str = json.dumps(data, ensure_ascii=False)
    # Escape </script> and <!-- to prevent HTML injection
    json_str = json_str.replace("</script>", "</scr\\u0069pt>")
    json_str = json_str.replace("<!--", "<\\u0021--")
    return json_str


def clip(text: str, limit: int) -> str:
    """Cut text to limit characters, saying how much was left out."""
    if len(text) <= limit:
        return text
    rest = len(text) - limit
    note = f"... {format_value(rest)} more; open the part with `ctx-treemap view`"
    return f"{text[:limit]}\n\n{note}"


def tree_to_dict(node: TreeNode) -> dict:
    """Convert a tree to the renderer's dict shape (camelCase keys)."""
    return node.model_dump(by_alias=True, exclude_none=True)


def forest(root: TreeNode, title: str = "session") -> list[dict]:
    """The forest handed to a treemap renderer: named roots."""
    return [{"name": title, "data": tree_to_dict(root)}]


def compute_metadata(root: TreeNode, session_id: str | None = None) -> dict:
    """Summary numbers for a built tree."""
    leaves = list(iter_leaves(root))
    total = leaf_total(root)
    return {
        "session_id": session_id,
        "messages": len(root.children or []),
        "parts": len(leaves),
        "total_chars": total,
        "total": format_value(total),
    }


def render_json(root: TreeNode, session_id: str | None = None, compact: bool = False) -> str:
    """Render the forest as a JSON string."""
    ordered = {
        "metadata": compute_metadata(root, session_id),
        "palette": PALETTE,
        "nodes": forest(root, session_id or "session"),
    }
    return json.dumps(ordered, indent=None if compact else 2, ensure_ascii=False)


def render(
    root: TreeNode,
    index: PartIndex,
    title: str = "session",
    palette: dict[str, str] = PALETTE,
    detail_limit: int = HTML_DETAIL_LIMIT,
) -> str:
    """Render the treemap to a self-contained HTML string.

    A static page has nobody to ask for details later, so the detail text of
    every leaf is materialized up front and embedded, clipped to detail_limit.
    """
    template_dir = Path(__file__).parent / "templates"
    env = Environment(loader=FileSystemLoader(template_dir), autoescape=True)
    template = env.get_template("treemap.html.j2")

    details = {
        leaf.leaf_key: clip(part_content(index.resolve(leaf.leaf_key)), detail_limit)
        for leaf in iter_leaves(root)
    }
    data = {
        "nodes": forest(root, title),
        "palette": palette,
        "details": details,
    }
    return template.render(
        title=title,
        total=format_value(leaf_total(root)),
        data_json=json_for_html(data),
    )
