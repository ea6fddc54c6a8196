"""Interactive terminal view of one session's treemap."""

import shutil
import traceback
from collections.abc import Callable
from enum import Enum

import typer

from .colors import color_for
from .config import PALETTE, GroupingPolicy, SizePolicy
from .content import part_content
from .models import SessionSnapshot, TreeNode
from .renderer import format_value
from .tree import PartIndex, build_tree, iter_leaves, leaf_total


class Mode(str, Enum):
    TREEMAP = "treemap"
    DETAIL = "detail"


class SessionView:
    """Everything that belongs to one loaded session.

    A new session gets a new view; nothing carries over from the previous one.
    """

    def __init__(
        self,
        root: TreeNode,
        index: PartIndex,
        title: str = "session",
        palette: dict[str, str] = PALETTE,
    ):
        self.root = root
        self.index = index
        self.title = title
        self.palette = palette
        self.leaves = list(iter_leaves(root))
        self.mode = Mode.TREEMAP
        self.selected: str | None = None
        self.detail: str | None = None

    @classmethod
    def from_snapshot(
        cls,
        snapshot: SessionSnapshot,
        grouping: GroupingPolicy = GroupingPolicy.TYPE,
        size_policy: SizePolicy = SizePolicy.ZERO,
    ) -> "SessionView":
        root, index = build_tree(snapshot, grouping=grouping, size_policy=size_policy)
        title = "session"
        if snapshot.info is not None:
            title = snapshot.info.title or snapshot.info.id
        return cls(root, index, title=title)

    def select(self, leaf_key: str) -> str:
        """Show the full content of a leaf. Unknown keys raise KeyError."""
        part = self.index.resolve(leaf_key)
        self.detail = part_content(part)
        self.selected = leaf_key
        self.mode = Mode.DETAIL
        return self.detail

    def select_number(self, number: int) -> str:
        """Select by the 1-based number shown next to each leaf."""
        leaf = self.leaves[number - 1]
        if leaf.leaf_key is None:
            raise KeyError(f"Leaf {leaf.name!r} has no key")
        return self.select(leaf.leaf_key)

    def back(self) -> None:
        """Return to the treemap."""
        self.mode = Mode.TREEMAP
        self.selected = None
        self.detail = None


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    color = color.lstrip("#")
    return int(color[0:2], 16), int(color[2:4], 16), int(color[4:6], 16)


def outline(view: SessionView, width: int = 80, color: bool = True) -> list[str]:
    """Text treemap: one row per node, bars proportional to size."""
    grand = leaf_total(view.root)
    numbers = {leaf.leaf_key: i for i, leaf in enumerate(view.leaves, 1)}
    bar_width = max(10, width // 3)
    lines = [f"{view.title}  {format_value(grand)}  ({len(view.leaves)} parts)", ""]

    def walk(node: TreeNode, depth: int) -> None:
        for child in node.children or []:
            size = leaf_total(child)
            cells = round(bar_width * size / grand) if grand else 0
            bar = ("█" * cells).ljust(bar_width)
            if color:
                bar = typer.style(bar, fg=hex_to_rgb(color_for(child.color_type, view.palette)))
            number = f"{numbers[child.leaf_key]:>4}" if child.is_leaf else "    "
            indent = "  " * depth
            lines.append(f"{number} {bar} {indent}{child.name}  {format_value(size)}")
            walk(child, depth + 1)

    walk(view.root, 0)
    return lines


def error_panel(exc: BaseException) -> list[str]:
    """Inline replacement for a view that failed to draw."""
    trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return [typer.style(f"Error: {exc}", fg="red"), typer.style(trace, fg="bright_black")]


def boundary(draw: Callable[[], list[str]]) -> list[str]:
    """Draw a view; a failure becomes an error panel instead of a crash."""
    try:
        return draw()
    except Exception as e:
        return error_panel(e)


def run(view: SessionView, width: int | None = None, can_switch: bool = False) -> bool:
    """Treemap and detail views until the user leaves.

    Returns True when the user asked to pick another session.
    """
    width = width or shutil.get_terminal_size().columns
    while True:
        if view.mode == Mode.DETAIL:
            for line in boundary(lambda: (view.detail or "").splitlines()):
                typer.echo(line)
            typer.prompt("Enter to go back", default="", show_default=False)
            view.back()
            continue

        for line in boundary(lambda: outline(view, width)):
            typer.echo(line)
        hint = "Leaf number to inspect, q to quit"
        if can_switch:
            hint = "Leaf number to inspect, s to switch session, q to quit"
        answer = typer.prompt(hint, default="", show_default=False).strip()
        if answer.lower() in ("q", "quit"):
            return False
        if can_switch and answer.lower() == "s":
            return True
        if answer.isdigit() and 1 <= int(answer) <= len(view.leaves):
            view.select_number(int(answer))
        elif answer:
            typer.echo(f"No leaf {answer!r}")
