"""Full-text rendering of a single part for the detail view."""

import json
from typing import Any

from .models import (
    FilePart,
    Part,
    ReasoningPart,
    SubtaskPart,
    TextPart,
    ToolPart,
    ToolStateCompleted,
    ToolStateError,
)


def pretty(value: Any) -> str:
    """Indented JSON dump."""
    return json.dumps(value, indent=2, ensure_ascii=False)


def header(title: str) -> str:
    return f"=== {title} ==="


def tool_content(part: ToolPart) -> str:
    state = part.state
    lines = [header(f"TOOL: {part.tool}"), f"Status: {state.status}"]
    if part.callID:
        lines.append(f"Call: {part.callID}")
    lines += ["", "Input:", pretty(state.input), ""]

    if isinstance(state, ToolStateCompleted):
        if state.compacted:
            lines += ["Output (compacted, no longer in context):", state.output]
        else:
            lines += ["Output:", state.output]
    elif isinstance(state, ToolStateError):
        lines += ["Error:", state.error]
    else:
        lines.append(f"({state.status}...)")
    return "\n".join(lines)


def part_content(part: Part) -> str:
    """Multi-line body for a part. Only called for the selected leaf."""
    if isinstance(part, TextPart):
        return "\n".join([header("TEXT"), "", part.text])
    if isinstance(part, ReasoningPart):
        return "\n".join([header("REASONING"), "", part.text])
    if isinstance(part, ToolPart):
        return tool_content(part)
    if isinstance(part, FilePart):
        lines = [header(f"FILE: {part.filename or part.url}")]
        if part.mime:
            lines.append(f"Mime: {part.mime}")
        if part.source is not None and part.source.path:
            lines.append(f"Path: {part.source.path}")
        lines.append("")
        if part.source is not None and part.source.text is not None:
            lines.append(part.source.text.value)
        else:
            lines.append("(no inline content)")
        return "\n".join(lines)
    if isinstance(part, SubtaskPart):
        return "\n".join(
            [
                header(f"SUBTASK: {part.agent}"),
                "",
                "Description:",
                part.description,
                "",
                "Prompt:",
                part.prompt,
            ]
        )
    return "\n".join(
        [header(part.type.upper()), "", pretty(part.model_dump(mode="json", exclude_none=True))]
    )
