import igraph as ig

from genogram_viz.builder import build_graph
from genogram_viz.diagnostics import DiagnosticKind, DiagnosticLog
from genogram_viz.layering import (
    align_groups,
    assign_layers,
    break_cycles,
    compact,
    longest_path_layers,
    normalize_layer_sizes,
)
from genogram_viz.model import Family, Marriage
from genogram_viz.network import COUPLE, DUMMY, PERSON, LayoutNetwork, make_network


def test_longest_path_layers():
    # 0 -> 1 -> 2, 0 -> 2, 3 isolated
    g = ig.Graph(n=4, edges=[(0, 1), (1, 2), (0, 2)], directed=True)
    assert longest_path_layers(g) == [0, 1, 2, 0]


def test_align_groups_pushes_group_down():
    # 0 -> 1 -> 2 and 3 alone; 2 and 3 must share a layer, 4 hangs below 3
    g = ig.Graph(n=5, edges=[(0, 1), (1, 2), (3, 4)], directed=True)
    layers = align_groups(g, longest_path_layers(g), [[2, 3]])
    assert layers == [0, 1, 2, 2, 3]


def test_align_groups_conflict():
    # 1 is a descendant of 0, they cannot share a layer
    g = ig.Graph(n=2, edges=[(0, 1)], directed=True)
    assert align_groups(g, longest_path_layers(g), [[0, 1]]) is None


def test_compact():
    assert compact([0, 3, 3, 7, 0]) == [0, 1, 1, 2, 0]


def test_couple_child_layers(couple_with_child):
    graph = build_graph(couple_with_child)
    net = make_network(graph)
    assert assign_layers(net, DiagnosticLog()) == 2
    label = net.find_vertex(graph.find_marriage(1, 2).key)
    assert label.layer == 0
    assert net.find_vertex(3).layer == label.layer + 1


def test_multi_spouse_marriages_share_layer(two_spouses):
    graph = build_graph(two_spouses)
    net = make_network(graph)
    log = DiagnosticLog()
    assign_layers(net, log)

    first = net.find_vertex(graph.find_marriage(1, 2).key)
    second = net.find_vertex(graph.find_marriage(1, 4).key)
    # 2 has parents and grandparents, so the 1-2 marriage is two generations down
    assert first.layer == 2
    assert second.layer == first.layer
    dummy = net.dummies()[0]
    assert dummy.layer == first.layer - 1
    assert len(log) == 0

    # children below their parents' marriage
    for edge in net.edges:
        assert net.vertices[edge.source].layer < net.vertices[edge.target].layer


def test_cohort_conflict_keeps_generations(person):
    # 1 married to 2, and later to 3, a child of 1 and 2
    family = Family(
        people=[person(1, "M"), person(2, "F"), person(3, "F")],
        marriages=[Marriage(1, 2, [3]), Marriage(1, 3)],
    )
    graph = build_graph(family)
    net = make_network(graph)
    log = DiagnosticLog()
    assign_layers(net, log)

    assert [d.kind for d in log] == [DiagnosticKind.COHORT_CONFLICT]
    first = net.find_vertex(graph.find_marriage(1, 2).key)
    second = net.find_vertex(graph.find_marriage(1, 3).key)
    assert second.layer == first.layer + 1


def test_break_cycles():
    net = LayoutNetwork()
    a = net.add_vertex(PERSON, 1, 10, 10)
    b = net.add_vertex(PERSON, 2, 10, 10)
    c = net.add_vertex(PERSON, 3, 10, 10)
    net.link(a, b)
    net.link(b, c)
    net.link(c, a)

    log = DiagnosticLog()
    dropped = break_cycles(net, log)
    assert len(dropped) == 1
    assert len(net.edges) == 2
    assert [d.kind for d in log] == [DiagnosticKind.CYCLE]
    assert net.to_igraph().is_dag()
    assert assign_layers(net, log) == 3


def test_break_cycles_leaves_dag_alone(couple_with_child):
    net = make_network(build_graph(couple_with_child))
    assert break_cycles(net, DiagnosticLog()) == []
    assert len(net.edges) == 1


def test_assign_layers_empty_network():
    assert assign_layers(LayoutNetwork(), DiagnosticLog()) == 0


def _layer_network():
    net = LayoutNetwork()
    small = net.add_vertex(PERSON, 1, 100, 40)
    wide = net.add_vertex(COUPLE, -1, 230, 60, focus=(115, 30))
    dummy = net.add_vertex(DUMMY)
    for v in (small, wide, dummy):
        v.layer = 0
    return net, small, wide, dummy


def test_normalize_vertical_layers():
    net, small, wide, dummy = _layer_network()
    normalize_layer_sizes(net, horizontal=False)
    assert small.height == wide.height == dummy.height == 60
    assert (small.width, wide.width) == (100, 230)
    assert (small.focus_x, small.focus_y) == (50, 0)
    assert (wide.focus_x, wide.focus_y) == (115, 0)


def test_normalize_horizontal_layers():
    net, small, wide, dummy = _layer_network()
    normalize_layer_sizes(net, horizontal=True)
    assert small.width == wide.width == 230
    assert (small.focus_x, small.focus_y) == (0, 20)
    assert (wide.focus_x, wide.focus_y) == (0, 30)
    assert small.height == 40
