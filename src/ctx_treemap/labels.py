"""Captions for treemap nodes."""

import os
from typing import assert_never

from .config import FILE_TOOLS
from .models import (
    AgentPart,
    CompactionPart,
    FilePart,
    Part,
    PatchPart,
    ReasoningPart,
    RetryPart,
    SnapshotPart,
    StepFinishPart,
    StepStartPart,
    SubtaskPart,
    TextPart,
    ToolPart,
    UnknownPart,
)


def relative_path(path: str, root: str) -> str:
    """Path relative to root, or the path unchanged if it lies outside root.

    An empty root means paths are already as readable as they get.
    Relative paths come back unchanged.
    """
    if not root or not path or not os.path.isabs(path):
        return path
    try:
        rel = os.path.relpath(path, root)
    except ValueError:
        # Different drives on Windows
        return path
    if rel == os.pardir or rel.startswith(os.pardir + os.sep):
        return path
    return rel


def label_type(label: str) -> str:
    """Type prefix of a label: the text before the first colon."""
    return label.split(":", 1)[0]


def part_label(part: Part, root: str = "") -> str:
    """Caption for a part, e.g. ``tool:read:src/app.py`` or ``subtask:general``."""
    if isinstance(part, TextPart):
        return "text"
    if isinstance(part, ReasoningPart):
        return "reasoning"
    if isinstance(part, ToolPart):
        file_path = part.state.input.get("filePath")
        if part.tool.lower() in FILE_TOOLS and isinstance(file_path, str) and file_path:
            return f"tool:{part.tool}:{relative_path(file_path, root)}"
        return f"tool:{part.tool}"
    if isinstance(part, FilePart):
        if part.source is not None and part.source.path:
            return f"file:{relative_path(part.source.path, root)}"
        return f"file:{part.filename or part.url}"
    if isinstance(part, SubtaskPart):
        return f"subtask:{part.agent}"
    if isinstance(
        part,
        (
            StepStartPart,
            StepFinishPart,
            SnapshotPart,
            PatchPart,
            AgentPart,
            RetryPart,
            CompactionPart,
            UnknownPart,
        ),
    ):
        return part.type
    assert_never(part)
