"""
Color categories for treemap nodes.
"""

from .config import PALETTE
from .models import Part, Role, ToolPart


def color_category(part: Part, palette: dict[str, str] = PALETTE) -> str:
    """Palette key for a part; tools get their own key when the palette has one."""
    if isinstance(part, ToolPart):
        key = f"tool:{part.tool.lower()}"
        return key if key in palette else "tool"
    return part.type if part.type in palette else "unknown"


def role_category(role: Role) -> str:
    """Palette key for a top-level message node."""
    return role.value


def color_for(category: str | None, palette: dict[str, str] = PALETTE) -> str:
    """Hex color for a category, falling back to the unknown color."""
    return palette.get(category or "unknown", PALETTE["unknown"])
