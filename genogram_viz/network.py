"""The network the layered layout works on.

Married couples do not get a vertex per spouse. Instead the marriage label node
gets one vertex wide enough to hold both spouses, and parent-child edges that
end at a married child are re-routed to that child's marriage vertex. People
with more than one marriage are tied into cohorts: one dummy vertex per cohort,
linked to every marriage vertex of the cohort, so that all those marriages end
up in the same generation.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import igraph as ig

from .builder import GenogramGraph, ParentLink
from .config import LayoutConfig

logger = logging.getLogger(__name__)

PERSON = "person"
COUPLE = "couple"
DUMMY = "dummy"


@dataclass
class LayoutVertex:
    id: int
    kind: str
    node: Optional[int] = None  # person key, label key, or None for dummies
    width: float = 0.0
    height: float = 0.0
    focus_x: float = 0.0
    focus_y: float = 0.0
    layer: int = 0
    # top-left corner, assigned by the layout
    x: float = 0.0
    y: float = 0.0

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2


@dataclass
class LayoutEdge:
    source: int
    target: int
    # None for the cohort edges, which carry no visible link
    link: Optional[ParentLink] = None


@dataclass
class Couple:
    label: int
    one: int
    two: int
    vertex: int


class LayoutNetwork:
    def __init__(self):
        self.vertices: List[LayoutVertex] = []
        self.edges: List[LayoutEdge] = []
        # couple metadata, indexed by vertex id
        self.couples: Dict[int, Couple] = {}
        self.sizes: Dict[int, Tuple[float, float]] = {}
        self._by_node: Dict[int, int] = {}

    def add_vertex(
        self, kind: str, node: int = None, width: float = 0.0, height: float = 0.0, focus=None
    ) -> LayoutVertex:
        focus_x, focus_y = focus if focus is not None else (width / 2, height / 2)
        vertex = LayoutVertex(len(self.vertices), kind, node, width, height, focus_x, focus_y)
        self.vertices.append(vertex)
        if node is not None:
            self._by_node[node] = vertex.id
        return vertex

    def link(self, source: LayoutVertex, target: LayoutVertex, link: ParentLink = None) -> LayoutEdge:
        edge = LayoutEdge(source.id, target.id, link)
        self.edges.append(edge)
        return edge

    def remove_edges(self, edge_ids):
        drop = set(edge_ids)
        self.edges = [e for i, e in enumerate(self.edges) if i not in drop]

    def find_vertex(self, node: int) -> Optional[LayoutVertex]:
        vid = self._by_node.get(node)
        return None if vid is None else self.vertices[vid]

    def couple_for_label(self, label: int) -> Optional[Couple]:
        vertex = self.find_vertex(label)
        return None if vertex is None else self.couples.get(vertex.id)

    def size_of(self, person: int) -> Tuple[float, float]:
        return self.sizes[person]

    def predecessors(self, vertex: LayoutVertex) -> List[LayoutVertex]:
        return [self.vertices[e.source] for e in self.edges if e.target == vertex.id]

    def successors(self, vertex: LayoutVertex) -> List[LayoutVertex]:
        return [self.vertices[e.target] for e in self.edges if e.source == vertex.id]

    def dummies(self) -> List[LayoutVertex]:
        return [v for v in self.vertices if v.kind == DUMMY]

    def to_igraph(self) -> ig.Graph:
        """Directed igraph view; vertex i is vertices[i], edge j is edges[j]."""
        g = ig.Graph(
            n=len(self.vertices),
            edges=[(e.source, e.target) for e in self.edges],
            directed=True,
        )
        g.vs["kind"] = [v.kind for v in self.vertices]
        g.vs["node"] = [v.node for v in self.vertices]
        return g


def extend_cohort(start: int, spouses: Dict[int, List[int]]) -> List[int]:
    """Everyone reachable from start by following marriages, start included."""
    cohort = {}
    stack = [start]
    while stack:
        person = stack.pop()
        if person in cohort:
            continue
        cohort[person] = None
        stack.extend(s for s in spouses.get(person, ()) if s not in cohort)
    return list(cohort)


def node_size(person, sizes, config: LayoutConfig) -> Tuple[float, float]:
    width, height = (sizes or {}).get(person.key, (None, None))
    if person.width is not None:
        width = person.width
    if person.height is not None:
        height = person.height
    return (
        config.node_width if width is None else width,
        config.node_height if height is None else height,
    )


def make_network(graph: GenogramGraph, sizes: dict = None, config: LayoutConfig = None) -> LayoutNetwork:
    config = config or LayoutConfig()
    net = LayoutNetwork()

    visible = {key for key, p in graph.people.items() if p.visible}
    for key in visible:
        net.sizes[key] = node_size(graph.people[key], sizes, config)

    # only marriages between two laid-out people take part
    marriages = [lab for lab in graph.labels.values() if lab.one in visible and lab.two in visible]
    labels_of = defaultdict(list)
    spouses = defaultdict(list)
    for lab in marriages:
        labels_of[lab.one].append(lab.key)
        labels_of[lab.two].append(lab.key)
        spouses[lab.one].append(lab.two)
        spouses[lab.two].append(lab.one)

    # don't add a vertex for any married person, the marriage vertex holds them
    multi_spouse_people = []
    for key, person in graph.people.items():
        if key not in visible:
            continue
        count = len(labels_of[key])
        if count == 0:
            width, height = net.sizes[key]
            net.add_vertex(PERSON, key, width, height)
        elif count > 1:
            multi_spouse_people.append(key)

    for lab in marriages:
        width_a, height_a = net.sizes[lab.one]
        width_b, height_b = net.sizes[lab.two]
        width = width_a + config.spouse_spacing + width_b
        height = max(height_a, height_b)
        vertex = net.add_vertex(
            COUPLE,
            lab.key,
            width,
            height,
            focus=(width_a + config.spouse_spacing / 2, height / 2),
        )
        net.couples[vertex.id] = Couple(lab.key, lab.one, lab.two, vertex.id)

    # parent-child edges
    for link in graph.parent_links:
        parent = net.find_vertex(link.label)
        if parent is None:
            continue
        child = net.find_vertex(link.child)
        if child is not None:
            net.link(parent, child, link)
            continue
        # a married child: connect with the vertex of each of its marriages
        for label in labels_of.get(link.child, ()):
            net.link(parent, net.find_vertex(label), link)

    # tie multiply-married people and their spouses into one generation
    pending = dict.fromkeys(multi_spouse_people)
    while pending:
        start = next(iter(pending))
        cohort = extend_cohort(start, spouses)
        dummy = net.add_vertex(DUMMY)
        cohort_marriages = dict.fromkeys(label for person in cohort for label in labels_of[person])
        for label in cohort_marriages:
            net.link(dummy, net.find_vertex(label))
        logger.debug(f"cohort {cohort} -> {len(cohort_marriages)} marriages")
        for person in cohort:
            pending.pop(person, None)

    return net
