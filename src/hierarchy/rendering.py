from collections.abc import Sequence

from .fold import Path, visit
from .graph import HierarchyNode
from .views import DerivedNode

INDENT = "  "


def render_hierarchy(node: HierarchyNode) -> list[str]:
    lines: list[str] = []

    def emit(path: Path) -> None:
        lines.append(f"{INDENT * (len(path) - 1)}- `{path[-1]}`")

    visit(node, emit)
    return lines


def render_view(nodes: Sequence[DerivedNode], depth: int = 0) -> list[str]:
    lines: list[str] = []
    for node in nodes:
        label = f"{INDENT * depth}- `{node}`"
        if node.verdict is not None:
            label += f" ({node.verdict.reason()})" if not node.verdict.is_ok else " (supported)"
        lines.append(label)
        lines.extend(render_view(node.children, depth + 1))
    return lines
