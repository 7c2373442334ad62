import itertools

import pytest

from genogram_viz.builder import build_graph
from genogram_viz.config import LayoutConfig
from genogram_viz.diagnostics import DiagnosticKind
from genogram_viz.layout import GenogramLayout, layout_family
from genogram_viz.model import Family, Marriage


def test_couple_with_child_layers(couple_with_child):
    graph = build_graph(couple_with_child)
    result = layout_family(graph)
    label = graph.find_marriage(1, 2).key

    assert result.layer_of(label) == 0
    assert result.layer_of(1) == result.layer_of(2) == 0
    assert result.layer_of(3) == result.layer_of(label) + 1
    assert len(result.diagnostics) == 0


def test_couple_side_by_side(couple_with_child):
    graph = build_graph(couple_with_child)
    config = LayoutConfig(spouse_spacing=30)
    result = layout_family(graph, config)
    father, mother = result.placements[1], result.placements[2]

    assert result.spouse_order[graph.find_marriage(1, 2).key] == (1, 2)
    assert father.y == mother.y
    assert mother.x == pytest.approx(father.right + 30)


def test_only_child_is_centered_under_parents(couple_with_child):
    graph = build_graph(couple_with_child)
    result = layout_family(graph)
    label = result.placements[graph.find_marriage(1, 2).key]
    child = result.placements[3]
    father, mother = result.placements[1], result.placements[2]

    midpoint = (father.x + mother.right) / 2
    assert label.x == pytest.approx(midpoint)
    assert child.x == pytest.approx(midpoint - child.width / 2)
    assert child.y > father.bottom


def test_mother_declared_first_still_goes_right(person):
    family = Family(people=[person(2, "F"), person(1, "M")], marriages=[Marriage(2, 1)])
    graph = build_graph(family)
    result = layout_family(graph)
    assert result.spouse_order[graph.find_marriage(1, 2).key] == (1, 2)
    assert result.placements[1].x < result.placements[2].x


def test_same_sex_couple_keeps_declared_order(person):
    family = Family(people=[person(1, "F"), person(2, "F")], marriages=[Marriage(2, 1)])
    graph = build_graph(family)
    result = layout_family(graph)
    assert result.spouse_order[graph.find_marriage(1, 2).key] == (2, 1)


def test_two_spouses_same_layer(person):
    family = Family(
        people=[person(1, "M"), person(2, "F"), person(4, "F")],
        marriages=[Marriage(1, 2), Marriage(1, 4)],
    )
    graph = build_graph(family)
    result = layout_family(graph)
    first = result.layer_of(graph.find_marriage(1, 2).key)
    second = result.layer_of(graph.find_marriage(1, 4).key)
    assert first == second


def test_cohort_shares_layer_with_deep_ancestry(two_spouses):
    graph = build_graph(two_spouses)
    result = layout_family(graph)
    for key in graph.people:
        layers = {result.layer_of(lab.key) for lab in graph.marriages_of(key)}
        assert len(layers) <= 1


def test_children_below_parents(three_generations):
    graph = build_graph(three_generations)
    result = layout_family(graph)
    for link in graph.parent_links:
        assert result.layer_of(link.child) > result.layer_of(link.label)
        assert result.placements[link.child].y > result.placements[link.label].y


def test_parent_routes_start_at_parents_marriage(three_generations):
    graph = build_graph(three_generations)
    result = layout_family(graph)
    parents = {}
    for marriage in three_generations.marriages:
        for child in marriage.children:
            parents[child] = {marriage.one, marriage.two}

    routes = [r for r in result.routes if r.kind == "parent"]
    assert len(routes) == len(graph.parent_links)
    for route in routes:
        label = graph.labels[route.source]
        assert {label.one, label.two} == parents[route.target]
        assert route.start == (result.placements[route.source].x, result.placements[route.source].y)
        child = result.placements[route.target]
        assert route.end == (child.center_x, child.y)


def test_no_overlapping_boxes(three_generations):
    graph = build_graph(three_generations)
    result = layout_family(graph)
    boxes = [result.placements[key] for key in graph.people]
    for a, b in itertools.combinations(boxes, 2):
        assert not a.overlaps(b), (a, b)


def test_layout_is_idempotent(two_spouses):
    graph = build_graph(two_spouses)
    layout = GenogramLayout()
    first = layout.do_layout(graph)
    second = layout.do_layout(graph)
    third = GenogramLayout().do_layout(build_graph(two_spouses))

    assert first.layers == second.layers == third.layers
    assert first.spouse_order == second.spouse_order == third.spouse_order
    assert first.placements == second.placements
    # graph diagnostics are copied, not accumulated
    assert len(first.diagnostics) == len(second.diagnostics)


def test_horizontal_layout(couple_with_child):
    graph = build_graph(couple_with_child)
    result = layout_family(graph, LayoutConfig(direction=0))
    label = result.placements[graph.find_marriage(1, 2).key]
    child = result.placements[3]
    assert child.x > label.x
    assert result.routes[-1].end == (child.x, child.center_y)


def test_bottom_up_layout(couple_with_child):
    graph = build_graph(couple_with_child)
    result = layout_family(graph, LayoutConfig(direction=270))
    assert result.placements[3].bottom < result.placements[1].y


def test_invalid_direction():
    with pytest.raises(ValueError):
        LayoutConfig(direction=45)


def test_suppressed_spouse_collapses(person):
    family = Family(
        people=[person(1, "M"), person(2, "F", suppressed=True)],
        marriages=[Marriage(1, 2)],
    )
    graph = build_graph(family)
    result = layout_family(graph)
    assert (result.placements[1].x, result.placements[1].y) == (result.placements[2].x, result.placements[2].y)


def test_ancestry_cycle_is_reported(person):
    # 1 and 2 have child 3; 3 and 4 are listed as parents of 1
    family = Family(
        people=[person(1, "M"), person(2, "F"), person(3, "M"), person(4, "F")],
        marriages=[Marriage(1, 2, [3]), Marriage(3, 4, [1])],
    )
    graph = build_graph(family)
    result = layout_family(graph)
    assert result.diagnostics.of_kind(DiagnosticKind.CYCLE)
    assert set(graph.people) <= set(result.placements)


def test_graph_diagnostics_are_carried(person):
    family = Family(people=[person(5)], marriages=[Marriage(5, 5)])
    result = layout_family(build_graph(family))
    assert [d.kind for d in result.diagnostics] == [DiagnosticKind.SELF_MARRIAGE]
    assert 5 in result.placements


def test_empty_family():
    result = layout_family(build_graph(Family()))
    assert result.placements == {}
    assert result.routes == []
    assert result.bounds() == (0.0, 0.0, 0.0, 0.0)


def test_bounds_start_at_origin(three_generations):
    result = layout_family(build_graph(three_generations))
    min_x, min_y, max_x, max_y = result.bounds()
    assert min_x >= 0
    assert min_y == 0
    assert max_x > min_x and max_y > min_y
