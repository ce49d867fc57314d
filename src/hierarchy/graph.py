import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import NamedTuple

from capsets import CapabilityDescriptor

from .models import ProfileEntry

logger = logging.getLogger(__name__)

ROOTLESS_LABEL = "(all profiles)"


class NodeRecord(NamedTuple):
    entry: ProfileEntry | None
    children: tuple[int, ...]


class HierarchyNode:
    """Handle to one node of a :class:`HierarchyGraph`."""

    __slots__ = ("graph", "index")

    def __init__(self, graph: "HierarchyGraph", index: int) -> None:
        self.graph = graph
        self.index = index

    @property
    def entry(self) -> ProfileEntry | None:
        return self.graph.records[self.index].entry

    @property
    def children(self) -> list["HierarchyNode"]:
        return [HierarchyNode(self.graph, child) for child in self.graph.records[self.index].children]

    @property
    def is_rootless(self) -> bool:
        return self.entry is None

    @property
    def descriptor(self) -> CapabilityDescriptor | None:
        entry = self.entry
        return None if entry is None else entry.descriptor

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HierarchyNode):
            return NotImplemented
        return self.graph is other.graph and self.index == other.index

    def __hash__(self) -> int:
        return hash((id(self.graph), self.index))

    def __str__(self) -> str:
        entry = self.entry
        return ROOTLESS_LABEL if entry is None else str(entry)

    def __repr__(self) -> str:
        return f"HierarchyNode({self.index}, {self})"


class _Slot:
    __slots__ = ("entry", "node", "names")

    def __init__(self, entry: ProfileEntry | None, node: int | None, names: frozenset[str]) -> None:
        self.entry = entry
        self.node = node
        self.names = names


class HierarchyGraph:
    """Forest of profiles where each node's children are its nearest discovered subsets.

    Nodes live in an arena (``records``) and refer to their children by index.
    The graph is read-only once built.
    """

    def __init__(self, records: Sequence[NodeRecord], roots: Sequence[int], rootless: int | None = None) -> None:
        self.records: tuple[NodeRecord, ...] = tuple(records)
        self.root_indexes: tuple[int, ...] = tuple(roots)
        self.rootless_index = rootless

    @classmethod
    def create(cls, entries: Iterable[ProfileEntry], group_roots: bool = True) -> "HierarchyGraph":
        builder = _HierarchyBuilder()
        slots: list[_Slot | None] = [_Slot(entry, None, entry.capability_names) for entry in entries]
        builder.partition(slots, level=0)

        roots = [slot.node for slot in slots if slot is not None and slot.node is not None]
        rootless = None
        if group_roots:
            rootless = builder.add(None, tuple(roots))

        logger.debug("Built hierarchy with %d profiles and %d roots", len(builder.records) - (rootless is not None), len(roots))
        return cls(builder.records, roots, rootless)

    @property
    def roots(self) -> list[HierarchyNode]:
        return [HierarchyNode(self, index) for index in self.root_indexes]

    @property
    def root(self) -> HierarchyNode:
        if self.rootless_index is not None:
            return HierarchyNode(self, self.rootless_index)
        if len(self.root_indexes) == 1:
            return HierarchyNode(self, self.root_indexes[0])
        raise ValueError(f"hierarchy has {len(self.root_indexes)} roots and no grouping node")

    def node(self, index: int) -> HierarchyNode:
        if not 0 <= index < len(self.records):
            raise IndexError(f"node index out of range: {index}")
        return HierarchyNode(self, index)

    def walk(self) -> Iterator[HierarchyNode]:
        """Yield every node pre-order, starting from the grouping node when present."""
        start = [self.rootless_index] if self.rootless_index is not None else list(self.root_indexes)
        stack = list(reversed(start))
        while stack:
            index = stack.pop()
            yield HierarchyNode(self, index)
            stack.extend(reversed(self.records[index].children))

    def find(self, descriptor: CapabilityDescriptor) -> HierarchyNode | None:
        for node in self.walk():
            if node.descriptor == descriptor:
                return node
        return None

    def __len__(self) -> int:
        return sum(1 for record in self.records if record.entry is not None)


class _HierarchyBuilder:
    def __init__(self) -> None:
        self.records: list[NodeRecord] = []

    def add(self, entry: ProfileEntry | None, children: tuple[int, ...]) -> int:
        self.records.append(NodeRecord(entry, children))
        return len(self.records) - 1

    def partition(self, slots: list[_Slot | None], level: int) -> None:
        """Resolve every pending entry in ``slots`` into a node, in place.

        Each pending entry takes every remaining slot it is a definite superset of,
        those taken slots are partitioned recursively, and what is left of them
        becomes the entry's direct children.
        """
        for position, master in enumerate(slots):
            if master is None or master.entry is None:
                continue

            bucket: list[_Slot | None] = [None] * len(slots)
            for other_position, candidate in enumerate(slots):
                if other_position == position or candidate is None:
                    continue
                candidate_entry = candidate.entry or self.records[candidate.node].entry
                if candidate_entry is None:
                    continue
                if master.entry.is_superset_of(candidate_entry, candidate.names) is True:
                    logger.debug("%s%s contains %s", "  " * level, master.entry, candidate_entry)
                    bucket[other_position] = candidate
                    slots[other_position] = None

            self.partition(bucket, level + 1)

            children = tuple(slot.node for slot in bucket if slot is not None and slot.node is not None)
            names = master.entry.capability_names.union(*(slot.names for slot in bucket if slot is not None))
            slots[position] = _Slot(None, self.add(master.entry, children), names)
