import logging
from collections.abc import Awaitable, Callable, Iterable

from pydantic import BaseModel, ConfigDict

from capsets import CapabilityDescriptor

from .fold import FanOut, Path, fold, fold_async
from .graph import HierarchyNode
from .requirements import SatisfactionResult

logger = logging.getLogger(__name__)

Predicate = Callable[[HierarchyNode], Awaitable[SatisfactionResult]]


class DerivedNode(BaseModel):
    """A node of a filtered or simplified view, pointing back at its hierarchy node."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    shadow: HierarchyNode
    verdict: SatisfactionResult | None = None
    children: tuple["DerivedNode", ...] = ()

    @property
    def descriptor(self) -> CapabilityDescriptor | None:
        return self.shadow.descriptor

    @property
    def is_supported(self) -> bool | None:
        return None if self.verdict is None else self.verdict.is_ok

    def __str__(self) -> str:
        return str(self.shadow)


DerivedNode.model_rebuild()


async def filtered_view(
    node: HierarchyNode,
    predicate: Predicate,
    hide_unsupported: bool = True,
    collapse_single_child: bool = True,
    fan_out: FanOut = FanOut.CONCURRENT,
) -> list[DerivedNode]:
    """Keep the nodes ``predicate`` accepts; a dropped node's children take its place.

    With ``collapse_single_child`` a node left with exactly one kept child is
    spliced away without consulting the predicate. With ``hide_unsupported``
    turned off, rejected nodes stay in the view carrying their failed verdict.
    """

    async def keep_supported(path: Path, child_results: list[list[DerivedNode]]) -> list[DerivedNode]:
        children = _flatten(child_results)
        current = path[-1]
        if current.is_rootless or (collapse_single_child and len(children) == 1):
            return children

        verdict = await predicate(current)
        if verdict.is_ok or not hide_unsupported:
            return [DerivedNode(shadow=current, verdict=verdict, children=tuple(children))]

        logger.debug("Dropping %s from view: %s", current, verdict.reason())
        return children

    return await fold_async(node, keep_supported, fan_out=fan_out)


def simplified_view(node: HierarchyNode) -> list[DerivedNode]:
    """Collapse every single-child chain down to the node where it branches or ends."""

    def keep_branching(path: Path, child_results: list[list[DerivedNode]]) -> list[DerivedNode]:
        children = _flatten(child_results)
        current = path[-1]
        if current.is_rootless or len(children) == 1:
            return children
        return [DerivedNode(shadow=current, children=tuple(children))]

    return fold(node, keep_branching)


def _flatten(groups: Iterable[list[DerivedNode]]) -> list[DerivedNode]:
    return [node for group in groups for node in group]
