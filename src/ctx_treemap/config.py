"""
Configuration - Defaults shared by the client, the tree builder and the views.

Everything here can be overridden per invocation through CLI options
(and their environment variables).
"""

from enum import Enum

# Network configuration
SERVER_HOSTNAME = "127.0.0.1"
SERVER_COMMAND = "opencode"

# Timeouts (in seconds)
REQUEST_TIMEOUT = 30  # Total time allowed for one HTTP request
SERVER_START_TIMEOUT = 10  # Wait for a spawned server to report its URL
SERVER_SHUTDOWN_TIMEOUT = 5  # Grace period before a spawned server is killed

# Longest detail text embedded per part in the HTML export
HTML_DETAIL_LIMIT = 20_000


class GroupingPolicy(str, Enum):
    """How parts are arranged under their message node."""

    TYPE = "type"  # same-type parts share an intermediate node
    FLAT = "flat"  # every part is a direct child of its message


class SizePolicy(str, Enum):
    """How bookkeeping parts (step-start, patch, ...) are sized."""

    ZERO = "zero"
    SERIALIZED = "serialized"


# Tools whose input carries the path of the file they touch
FILE_TOOLS = frozenset({"read", "write", "edit"})

# Color category -> hex color
PALETTE = {
    # Roles
    "user": "#4292c6",
    "assistant": "#41ab5d",
    # Content
    "text": "#6baed6",
    "reasoning": "#9e9ac8",
    "file": "#fd8d3c",
    "subtask": "#e377c2",
    # Tools
    "tool": "#74c476",
    "tool:bash": "#d62728",
    "tool:read": "#2171b5",
    "tool:write": "#e6550d",
    "tool:edit": "#fdae6b",
    "tool:glob": "#17becf",
    "tool:grep": "#9edae5",
    "tool:list": "#c6dbef",
    "tool:webfetch": "#bcbd22",
    "tool:task": "#8c6bb1",
    "tool:todowrite": "#a1d99b",
    "tool:todoread": "#c7e9c0",
    # Bookkeeping
    "step-start": "#d9d9d9",
    "step-finish": "#bdbdbd",
    "snapshot": "#969696",
    "patch": "#fdd0a2",
    "agent": "#dadaeb",
    "retry": "#fc9272",
    "compaction": "#737373",
    # Containers and anything unrecognized
    "group": "#525252",
    "unknown": "#636363",
}
