"""ctx-treemap: See what fills an OpenCode session's context window."""

from .config import GroupingPolicy, SizePolicy
from .content import part_content
from .labels import part_label
from .models import Message, Part, SessionInfo, SessionSnapshot, TreeNode
from .parser import parse_export
from .renderer import format_value, render
from .sizing import part_size
from .tree import PartIndex, build_tree

__all__ = [
    "GroupingPolicy",
    "Message",
    "Part",
    "PartIndex",
    "SessionInfo",
    "SessionSnapshot",
    "SizePolicy",
    "TreeNode",
    "build_tree",
    "format_value",
    "parse_export",
    "part_content",
    "part_label",
    "part_size",
    "render",
]
