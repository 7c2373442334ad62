"""Turn laid-out vertices back into node positions.

Couple vertices are split into their two spouses (fathers left, mothers right,
unless that would cross the lines to their own parents), hidden spouses are
collapsed onto their partner, and only children are moved under the middle of
their parents when there is room.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .builder import GenogramGraph
from .config import LayoutConfig
from .diagnostics import DiagnosticKind, DiagnosticLog
from .model import FEMALE, MALE, Person
from .network import COUPLE, PERSON, Couple, LayoutNetwork, LayoutVertex

logger = logging.getLogger(__name__)


@dataclass
class NodePlacement:
    key: int
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    def moved_to(self, x: float, y: float) -> "NodePlacement":
        return NodePlacement(self.key, x, y, self.width, self.height)

    def overlaps(self, other: "NodePlacement") -> bool:
        return (
            self.x < other.right
            and other.x < self.right
            and self.y < other.bottom
            and other.y < self.bottom
        )


@dataclass
class EdgeRoute:
    kind: str  # "marriage" | "parent"
    source: int
    target: int
    label: int
    points: List[Tuple[float, float]] = field(default_factory=list)

    @property
    def start(self) -> Tuple[float, float]:
        return self.points[0]

    @property
    def end(self) -> Tuple[float, float]:
        return self.points[-1]


def sex_rank(person: Person) -> int:
    if person.sex == MALE:
        return 0
    if person.sex == FEMALE:
        return 2
    return 1


def find_parents_label(
    graph: GenogramGraph, placements: Dict[int, NodePlacement], person: int, diagnostics: DiagnosticLog
) -> Optional[NodePlacement]:
    label = graph.parents_label_of(person)
    if label is None:
        return None
    placement = placements.get(label.key)
    if placement is None:
        diagnostics.add(
            DiagnosticKind.LAYOUT_SKIP,
            f"parents of {person} were not laid out",
            person,
            logger=logger,
            level=logging.DEBUG,
        )
    return placement


def place_spouses(
    vertex: LayoutVertex,
    couple: Couple,
    network: LayoutNetwork,
    graph: GenogramGraph,
    placements: Dict[int, NodePlacement],
    config: LayoutConfig,
    diagnostics: DiagnosticLog,
) -> Tuple[int, int]:
    left, right = graph.people[couple.one], graph.people[couple.two]
    # prefer fathers on the left, mothers on the right
    if sex_rank(left) > sex_rank(right):
        left, right = right, left

    # see if the parents are on the desired sides, to avoid a link crossing
    left_parents = find_parents_label(graph, placements, left.key, diagnostics)
    right_parents = find_parents_label(graph, placements, right.key, diagnostics)
    if left_parents is not None and right_parents is not None and left_parents.x > right_parents.x:
        left, right = right, left

    left_width, left_height = network.size_of(left.key)
    right_width, right_height = network.size_of(right.key)
    left_pos = NodePlacement(left.key, vertex.x, vertex.y, left_width, left_height)
    right_pos = NodePlacement(
        right.key, vertex.x + left_width + config.spouse_spacing, vertex.y, right_width, right_height
    )

    hidden_width = None
    if left.suppressed:
        hidden_width = left_width
    elif right.suppressed:
        hidden_width = right_width
    if hidden_width is not None:
        x = vertex.center_x - hidden_width / 2
        left_pos = left_pos.moved_to(x, vertex.y)
        right_pos = right_pos.moved_to(x, vertex.y)

    placements[left.key] = left_pos
    placements[right.key] = right_pos
    placements[couple.label] = NodePlacement(
        couple.label,
        (left_pos.right + right_pos.x) / 2,
        vertex.y + max(left_height, right_height) / 2,
    )
    return (left.key, right.key)


def settle_labels(placements: Dict[int, NodePlacement], spouse_order: Dict[int, Tuple[int, int]]):
    """Move each label node into the gap between its spouses' final boxes.

    A person married more than once is placed by every one of their couple
    vertices and keeps the last position, so earlier labels can be left
    outside the span of their own spouses.
    """
    for label, (one, two) in spouse_order.items():
        a, b = sorted((placements[one], placements[two]), key=lambda p: p.x)
        current = placements[label]
        placements[label] = current.moved_to((a.right + b.x) / 2, current.y)


def links_connected(graph: GenogramGraph, person: int) -> int:
    parents = sum(1 for link in graph.parent_links if link.child == person)
    return len(graph.marriages_of(person)) + parents


def center_only_children(
    network: LayoutNetwork,
    graph: GenogramGraph,
    placements: Dict[int, NodePlacement],
    horizontal: bool,
    diagnostics: DiagnosticLog,
):
    people = [p for k, p in placements.items() if k in graph.people]
    for v in network.vertices:
        if v.kind != PERSON or links_connected(graph, v.node) > 1:
            continue
        parents = graph.parents_label_of(v.node)
        if parents is None or len(graph.children_of(parents.key)) != 1:
            continue
        mvert = network.find_vertex(parents.key)
        if mvert is None:
            diagnostics.add(
                DiagnosticKind.LAYOUT_SKIP,
                f"parents of only child {v.node} were not laid out",
                v.node,
                logger=logger,
                level=logging.DEBUG,
            )
            continue

        current = placements[v.node]
        if horizontal:
            candidate = current.moved_to(current.x, mvert.center_y - current.height / 2)
        else:
            candidate = current.moved_to(mvert.center_x - current.width / 2, current.y)
        # only if there is empty space at the mid-point in that layer
        if any(candidate.overlaps(other) for other in people if other.key != v.node):
            continue
        placements[v.node] = candidate
        people = [placements[p.key] for p in people]


def commit_nodes(
    network: LayoutNetwork,
    graph: GenogramGraph,
    config: LayoutConfig,
    diagnostics: DiagnosticLog,
) -> Tuple[Dict[int, NodePlacement], Dict[int, Tuple[int, int]]]:
    """Place every person and label node; returns placements and spouse order."""
    placements = {}

    # position regular nodes
    for v in network.vertices:
        if v.kind == PERSON:
            width, height = network.size_of(v.node)
            placements[v.node] = NodePlacement(v.node, v.x, v.y, width, height)

    # label nodes start at the middle of their vertex
    for couple in network.couples.values():
        v = network.vertices[couple.vertex]
        placements[couple.label] = NodePlacement(couple.label, v.center_x, v.center_y)

    spouse_order = {}
    for v in network.vertices:
        if v.kind != COUPLE:
            continue
        couple = network.couples[v.id]
        spouse_order[couple.label] = place_spouses(v, couple, network, graph, placements, config, diagnostics)
    settle_labels(placements, spouse_order)

    center_only_children(network, graph, placements, config.horizontal, diagnostics)
    return placements, spouse_order


def _orthogonal(start, end, horizontal: bool) -> List[Tuple[float, float]]:
    (sx, sy), (ex, ey) = start, end
    if horizontal:
        if sy == ey:
            return [start, end]
        mid = (sx + ex) / 2
        return [start, (mid, sy), (mid, ey), end]
    if sx == ex:
        return [start, end]
    mid = (sy + ey) / 2
    return [start, (sx, mid), (ex, mid), end]


def _child_anchor(child: NodePlacement, direction: int) -> Tuple[float, float]:
    if direction == 90:
        return (child.center_x, child.y)
    if direction == 270:
        return (child.center_x, child.bottom)
    if direction == 0:
        return (child.x, child.center_y)
    return (child.right, child.center_y)


def route_edges(graph: GenogramGraph, placements: Dict[int, NodePlacement], direction: int) -> List[EdgeRoute]:
    """Endpoints and orthogonal bend points for every placed link."""
    routes = []
    for link in graph.marriage_links:
        if link.one not in placements or link.two not in placements:
            continue
        a, b = sorted((placements[link.one], placements[link.two]), key=lambda p: p.x)
        label = placements[link.label]
        points = [(a.right, a.center_y), (label.x, label.y), (b.x, b.center_y)]
        if a.center_y == b.center_y:
            points = [points[0], points[2]]
        routes.append(EdgeRoute("marriage", link.one, link.two, link.label, points))

    horizontal = direction in (0, 180)
    for link in graph.parent_links:
        if link.label not in placements or link.child not in placements:
            continue
        label = placements[link.label]
        end = _child_anchor(placements[link.child], direction)
        points = _orthogonal((label.x, label.y), end, horizontal)
        routes.append(EdgeRoute("parent", link.label, link.child, link.label, points))
    return routes
