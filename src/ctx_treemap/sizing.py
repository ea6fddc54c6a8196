"""Character-size estimates for message parts."""

import json
from typing import Any, assert_never

from .config import SizePolicy
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
    ToolStateCompleted,
    ToolStateError,
    ToolStatePending,
    ToolStateRunning,
    UnknownPart,
)


def serialized_length(value: Any) -> int:
    """Length of the compact JSON encoding of a value."""
    return len(json.dumps(value, separators=(",", ":"), ensure_ascii=False))


def wire_fields(part: Part) -> dict[str, Any]:
    """The fields a part arrived with; defaults filled in locally are left out."""
    data = part.model_dump(mode="json", exclude_unset=True)
    data["type"] = part.type
    return data


def tool_size(part: ToolPart) -> int:
    """Input is always charged; output only while it is still in context."""
    state = part.state
    input_size = serialized_length(state.input)
    if isinstance(state, (ToolStatePending, ToolStateRunning)):
        return input_size
    if isinstance(state, ToolStateCompleted):
        if state.compacted:
            return input_size
        return input_size + len(state.output)
    if isinstance(state, ToolStateError):
        return input_size + len(state.error)
    assert_never(state)


def part_size(part: Part, policy: SizePolicy = SizePolicy.ZERO) -> int:
    """Estimate how many characters a part occupies in the context window."""
    if isinstance(part, (TextPart, ReasoningPart)):
        return len(part.text)
    if isinstance(part, ToolPart):
        return tool_size(part)
    if isinstance(part, FilePart):
        if part.source is not None and part.source.text is not None:
            return len(part.source.text.value)
        # Remote reference only: the URL stands in for the content
        return len(part.url)
    if isinstance(part, SubtaskPart):
        return len(part.prompt) + len(part.description)
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
        ),
    ):
        if policy == SizePolicy.SERIALIZED:
            return serialized_length(wire_fields(part))
        return 0
    if isinstance(part, UnknownPart):
        return 0
    assert_never(part)
