"""Domain models for ctx-treemap."""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, model_validator


class Role(str, Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"


# Tool states


class ToolTime(BaseModel):
    """Timing of a tool call; `compacted` is set once its output is pruned."""

    model_config = ConfigDict(extra="allow")

    start: float | None = None
    end: float | None = None
    compacted: float | None = None


class ToolStatePending(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: Literal["pending"] = "pending"
    input: dict[str, Any] = {}
    raw: str = ""


class ToolStateRunning(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: Literal["running"] = "running"
    input: dict[str, Any] = {}
    title: str | None = None
    metadata: dict[str, Any] | None = None
    time: ToolTime | None = None


class ToolStateCompleted(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: Literal["completed"] = "completed"
    input: dict[str, Any] = {}
    output: str = ""
    title: str | None = None
    metadata: dict[str, Any] | None = None
    time: ToolTime | None = None

    @property
    def compacted(self) -> bool:
        """True when the output was pruned from the live context window."""
        return self.time is not None and self.time.compacted is not None


class ToolStateError(BaseModel):
    model_config = ConfigDict(extra="allow")

    status: Literal["error"] = "error"
    input: dict[str, Any] = {}
    error: str = ""
    metadata: dict[str, Any] | None = None
    time: ToolTime | None = None


ToolState = Annotated[
    Union[ToolStatePending, ToolStateRunning, ToolStateCompleted, ToolStateError],
    Field(discriminator="status"),
]


# Parts


class _PartBase(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = ""
    sessionID: str = ""
    messageID: str = ""


class TextPart(_PartBase):
    type: Literal["text"] = "text"
    text: str = ""
    synthetic: bool | None = None


class ReasoningPart(_PartBase):
    type: Literal["reasoning"] = "reasoning"
    text: str = ""


class ToolPart(_PartBase):
    type: Literal["tool"] = "tool"
    tool: str
    callID: str = ""
    state: ToolState


class FileSourceText(BaseModel):
    value: str
    start: int = 0
    end: int = 0


class FileSource(BaseModel):
    """Where a file part came from; `text` holds inline content when present."""

    model_config = ConfigDict(extra="allow")

    type: str = "file"
    path: str = ""
    text: FileSourceText | None = None


class FilePart(_PartBase):
    type: Literal["file"] = "file"
    mime: str = ""
    filename: str | None = None
    url: str = ""
    source: FileSource | None = None


class SubtaskPart(_PartBase):
    type: Literal["subtask"] = "subtask"
    prompt: str = ""
    description: str = ""
    agent: str = ""


class StepStartPart(_PartBase):
    type: Literal["step-start"] = "step-start"
    snapshot: str | None = None


class StepFinishPart(_PartBase):
    type: Literal["step-finish"] = "step-finish"
    reason: str = ""
    cost: int | float = 0
    tokens: dict[str, Any] | None = None


class SnapshotPart(_PartBase):
    type: Literal["snapshot"] = "snapshot"
    snapshot: str = ""


class PatchPart(_PartBase):
    type: Literal["patch"] = "patch"
    hash: str = ""
    files: list[str] = []


class AgentPart(_PartBase):
    type: Literal["agent"] = "agent"
    name: str = ""


class RetryPart(_PartBase):
    type: Literal["retry"] = "retry"
    attempt: int = 0
    error: dict[str, Any] | None = None


class CompactionPart(_PartBase):
    type: Literal["compaction"] = "compaction"
    auto: bool = False


class UnknownPart(_PartBase):
    """A part kind this tool does not know about yet."""

    type: str


PART_TYPES = (
    "text",
    "reasoning",
    "tool",
    "file",
    "subtask",
    "step-start",
    "step-finish",
    "snapshot",
    "patch",
    "agent",
    "retry",
    "compaction",
)


def _part_tag(value: Any) -> str:
    if isinstance(value, dict):
        kind = value.get("type")
    else:
        kind = getattr(value, "type", None)
    return kind if kind in PART_TYPES else "unknown"


Part = Annotated[
    Union[
        Annotated[TextPart, Tag("text")],
        Annotated[ReasoningPart, Tag("reasoning")],
        Annotated[ToolPart, Tag("tool")],
        Annotated[FilePart, Tag("file")],
        Annotated[SubtaskPart, Tag("subtask")],
        Annotated[StepStartPart, Tag("step-start")],
        Annotated[StepFinishPart, Tag("step-finish")],
        Annotated[SnapshotPart, Tag("snapshot")],
        Annotated[PatchPart, Tag("patch")],
        Annotated[AgentPart, Tag("agent")],
        Annotated[RetryPart, Tag("retry")],
        Annotated[CompactionPart, Tag("compaction")],
        Annotated[UnknownPart, Tag("unknown")],
    ],
    Discriminator(_part_tag),
]


# Messages and sessions


class MessageTime(BaseModel):
    model_config = ConfigDict(extra="allow")

    created: float = 0
    completed: float | None = None


class MessageInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = ""
    sessionID: str = ""
    role: Role
    time: MessageTime | None = None


class Message(BaseModel):
    """One message of a session with its ordered parts."""

    info: MessageInfo
    parts: list[Part] = []


class SessionTime(BaseModel):
    model_config = ConfigDict(extra="allow")

    created: float = 0
    updated: float | None = None


class SessionInfo(BaseModel):
    """Session metadata as listed by the server."""

    model_config = ConfigDict(extra="allow")

    id: str
    title: str | None = None
    directory: str | None = None
    time: SessionTime = SessionTime()


class SessionSnapshot(BaseModel):
    """A session fetched once: metadata (when available) plus all messages."""

    info: SessionInfo | None = None
    messages: list[Message] = []

    @property
    def directory(self) -> str:
        """Project root used to relativize paths, empty when unknown."""
        if self.info is None or not self.info.directory:
            return ""
        return self.info.directory


# Output tree


class TreeNode(BaseModel):
    """A node of the treemap forest.

    Containers (``children`` is a list, possibly empty) carry value 0; their
    size is the sum of their leaves. Leaves carry a ``leaf_key`` that resolves
    back to the originating part.
    """

    name: str
    value: int = 0
    layer: int = 0
    color_type: str | None = Field(default=None, serialization_alias="colorType")
    children: list["TreeNode"] | None = None
    leaf_key: str | None = Field(default=None, serialization_alias="leafKey")

    @model_validator(mode="after")
    def _check_shape(self) -> "TreeNode":
        if self.children is not None:
            if self.value != 0:
                raise ValueError(f"container {self.name!r} must have value 0")
        elif self.leaf_key is None:
            raise ValueError(f"leaf {self.name!r} requires a leaf_key")
        return self

    @property
    def is_leaf(self) -> bool:
        return self.children is None
