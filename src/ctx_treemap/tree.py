"""Builds the treemap forest for a session: session -> message -> [type] -> part."""

from collections.abc import Iterator

from .colors import color_category, role_category
from .config import PALETTE, GroupingPolicy, SizePolicy
from .labels import label_type, part_label
from .models import Message, Part, SessionSnapshot, TreeNode
from .sizing import part_size


class PartIndex:
    """Resolves a leaf key back to the part it was built from."""

    def __init__(self) -> None:
        self._parts: dict[str, Part] = {}

    def register(self, message_index: int, part_index: int, part: Part) -> str:
        key = f"{message_index}-{part_index}"
        if key in self._parts:
            raise ValueError(f"Duplicate leaf key: {key}")
        self._parts[key] = part
        return key

    def resolve(self, leaf_key: str) -> Part:
        """Part for a leaf key; raises KeyError for keys this index never issued."""
        return self._parts[leaf_key]

    def __contains__(self, leaf_key: object) -> bool:
        return leaf_key in self._parts

    def __len__(self) -> int:
        return len(self._parts)

    def keys(self) -> list[str]:
        return list(self._parts)


def _leaf(part: Part, name: str, size: int, layer: int, leaf_key: str, palette: dict) -> TreeNode:
    return TreeNode(
        name=name,
        value=size,
        layer=layer,
        color_type=color_category(part, palette),
        leaf_key=leaf_key,
    )


def build_message_node(
    message: Message,
    message_index: int,
    index: PartIndex,
    root: str = "",
    is_last: bool = False,
    grouping: GroupingPolicy = GroupingPolicy.TYPE,
    size_policy: SizePolicy = SizePolicy.ZERO,
    palette: dict[str, str] = PALETTE,
) -> TreeNode:
    """Container node for one message with its parts beneath it."""
    entries: list[tuple[Part, str, int, str]] = []
    for part_index, part in enumerate(message.parts):
        leaf_key = index.register(message_index, part_index, part)
        entries.append((part, part_label(part, root), part_size(part, size_policy), leaf_key))

    children: list[TreeNode] = []
    if grouping == GroupingPolicy.FLAT:
        for part, label, size, leaf_key in entries:
            children.append(_leaf(part, label, size, 1, leaf_key, palette))
    else:
        # Buckets keep first-seen order
        buckets: dict[str, list[tuple[Part, str, int, str]]] = {}
        for entry in entries:
            buckets.setdefault(label_type(entry[1]), []).append(entry)

        for kind, members in buckets.items():
            if len(members) == 1:
                part, label, size, leaf_key = members[0]
                children.append(_leaf(part, label, size, 1, leaf_key, palette))
                continue
            grouped = [
                _leaf(part, f"{kind}[{i}]" if label == kind else label, size, 2, leaf_key, palette)
                for i, (part, label, size, leaf_key) in enumerate(members)
            ]
            children.append(
                TreeNode(name=kind, value=0, layer=1, color_type="group", children=grouped)
            )

    role = message.info.role
    suffix = " (last)" if is_last else ""
    return TreeNode(
        name=f"{role.value}:{message_index}{suffix}",
        value=0,
        layer=0,
        color_type=role_category(role),
        children=children,
    )


def build_tree(
    snapshot: SessionSnapshot,
    grouping: GroupingPolicy = GroupingPolicy.TYPE,
    size_policy: SizePolicy = SizePolicy.ZERO,
    palette: dict[str, str] = PALETTE,
) -> tuple[TreeNode, PartIndex]:
    """Build the root node for a session and the index of its leaves.

    Every call starts from scratch; nothing is shared between two builds.
    """
    index = PartIndex()
    root = snapshot.directory
    messages = snapshot.messages
    message_nodes = [
        build_message_node(
            message,
            i,
            index,
            root=root,
            is_last=i == len(messages) - 1,
            grouping=grouping,
            size_policy=size_policy,
            palette=palette,
        )
        for i, message in enumerate(messages)
    ]
    tree = TreeNode(name="session", value=0, layer=0, children=message_nodes)
    return tree, index


def iter_leaves(node: TreeNode) -> Iterator[TreeNode]:
    """Yield leaves depth-first, in display order."""
    if node.children is None:
        yield node
        return
    for child in node.children:
        yield from iter_leaves(child)


def leaf_total(node: TreeNode) -> int:
    """Sum of leaf values below (or at) a node."""
    return sum(leaf.value for leaf in iter_leaves(node))
