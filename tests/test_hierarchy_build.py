import pytest

from capsets import CapabilityDescriptor, FilterSet, UnitSet
from hierarchy import HierarchyGraph, ProfileEntry


def _entry(name: str, names: set[str] | None = None, declared=None) -> ProfileEntry:
    return ProfileEntry(
        descriptor=CapabilityDescriptor(identifier=name, version=(1, 0)),
        capability_names=frozenset(names or ()),
        declared_set=declared,
    )


def _chain_entries() -> list[ProfileEntry]:
    return [_entry("A", {"X", "Y", "Z"}), _entry("B", {"X", "Y"}), _entry("C", {"X"})]


def _identifiers(nodes) -> list[str]:
    return [node.descriptor.identifier for node in nodes]


def test_incomparable_profiles_become_separate_roots() -> None:
    graph = HierarchyGraph.create([_entry("A", {"X"}), _entry("B", {"Y"}), _entry("C", {"Z"})])

    assert _identifiers(graph.roots) == ["A", "B", "C"]
    assert graph.root.is_rootless
    assert _identifiers(graph.root.children) == ["A", "B", "C"]
    assert len(graph) == 3


def test_name_subsets_build_a_chain() -> None:
    graph = HierarchyGraph.create(_chain_entries())

    (a,) = graph.roots
    assert a.descriptor.identifier == "A"
    assert _identifiers(a.children) == ["B"]
    assert _identifiers(a.children[0].children) == ["C"]
    assert a.children[0].children[0].children == []


def test_chain_does_not_depend_on_input_order() -> None:
    graph = HierarchyGraph.create(list(reversed(_chain_entries())))

    assert [str(node) for node in graph.walk()] == [
        "(all profiles)",
        "A,Version=v1.0",
        "B,Version=v1.0",
        "C,Version=v1.0",
    ]


def test_every_profile_appears_exactly_once() -> None:
    entries = _chain_entries() + [_entry("D", {"Y"}), _entry("E", {"Q"})]
    graph = HierarchyGraph.create(entries)

    seen = [node.descriptor for node in graph.walk() if not node.is_rootless]
    assert sorted(descriptor.identifier for descriptor in seen) == ["A", "B", "C", "D", "E"]
    assert len(seen) == len(set(seen))


def test_equal_name_sets_nest_under_the_first_profile() -> None:
    graph = HierarchyGraph.create([_entry("A", {"X"}), _entry("B", {"X"})])

    assert _identifiers(graph.roots) == ["A"]
    assert _identifiers(graph.roots[0].children) == ["B"]


def test_profiles_without_names_or_sets_stay_unrelated() -> None:
    graph = HierarchyGraph.create([_entry("A"), _entry("B")])

    assert _identifiers(graph.roots) == ["A", "B"]


def test_declared_sets_decide_containment() -> None:
    wide = _entry("Wide", declared=FilterSet(identifier="Net*", min_version=(4, 0)))
    narrow = _entry("Narrow", declared=FilterSet(identifier="NetCore*", min_version=(4, 5)))

    graph = HierarchyGraph.create([narrow, wide])

    assert _identifiers(graph.roots) == ["Wide"]
    assert _identifiers(graph.roots[0].children) == ["Narrow"]


def test_definite_set_answer_overrides_names() -> None:
    net = _entry("Net", {"X", "Y"}, declared=UnitSet(descriptor=CapabilityDescriptor.parse("Net,Version=v4.0")))
    mono = _entry("Mono", {"X"}, declared=UnitSet(descriptor=CapabilityDescriptor.parse("Mono,Version=v1.0")))

    graph = HierarchyGraph.create([net, mono])

    assert _identifiers(graph.roots) == ["Net", "Mono"]


def test_subtree_names_count_towards_containment() -> None:
    c = _entry("C", {"Y"}, declared=FilterSet(identifier="Net*"))
    b = _entry("B", {"X"}, declared=FilterSet(identifier="NetCore*"))
    # A covers C's own names but not the X that C's subtree brings along
    a = _entry("A", {"Y", "Z"})

    graph = HierarchyGraph.create([c, b, a])

    assert _identifiers(graph.roots) == ["C", "A"]
    assert _identifiers(graph.roots[0].children) == ["B"]


def test_ungrouped_graph_with_several_roots_has_no_single_root() -> None:
    graph = HierarchyGraph.create([_entry("A", {"X"}), _entry("B", {"Y"})], group_roots=False)

    assert graph.rootless_index is None
    with pytest.raises(ValueError, match="2 roots"):
        graph.root


def test_ungrouped_graph_with_one_root_exposes_it() -> None:
    graph = HierarchyGraph.create(_chain_entries(), group_roots=False)

    assert graph.root.descriptor.identifier == "A"
    assert not graph.root.is_rootless


def test_find_and_node_lookup() -> None:
    graph = HierarchyGraph.create(_chain_entries())

    found = graph.find(CapabilityDescriptor.parse("b,Version=v1.0"))
    assert found is not None
    assert found == graph.node(found.index)
    assert graph.find(CapabilityDescriptor.parse("Z,Version=v1.0")) is None
    with pytest.raises(IndexError):
        graph.node(len(graph.records))


def test_empty_input_builds_only_the_grouping_node() -> None:
    graph = HierarchyGraph.create([])

    assert graph.roots == []
    assert graph.root.is_rootless
    assert graph.root.children == []
    assert len(graph) == 0
