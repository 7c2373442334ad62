"""Turn a family into a node/link graph with one label node per marriage.

People become person nodes. Each realized marriage gets a synthetic label node
(negative key) sitting on the marriage link between the two spouses, and every
parent-child link starts at the label node of the parents' marriage.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

import igraph as ig

from .diagnostics import DiagnosticKind, DiagnosticLog
from .errors import MalformedPersonError
from .model import Family, Person

logger = logging.getLogger(__name__)

MARRIAGE_LINK_CATEGORY = "Marriage"
MARRIAGE_LINK_KEY = "LinkLabel"


@dataclass
class LabelNode:
    key: int
    one: int
    two: int

    @property
    def spouses(self) -> Tuple[int, int]:
        return (self.one, self.two)


@dataclass(frozen=True)
class MarriageLink:
    one: int
    two: int
    label: int


@dataclass(frozen=True)
class ParentLink:
    label: int
    child: int


@dataclass
class GenogramGraph:
    people: Dict[int, Person] = field(default_factory=dict)
    labels: Dict[int, LabelNode] = field(default_factory=dict)
    marriage_links: List[MarriageLink] = field(default_factory=list)
    parent_links: List[ParentLink] = field(default_factory=list)
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)
    _pairs: Dict[frozenset, int] = field(default_factory=dict, repr=False)

    def find_marriage(self, a: int, b: int) -> Optional[LabelNode]:
        """Label node of the marriage between a and b, in either direction."""
        key = self._pairs.get(frozenset((a, b)))
        return None if key is None else self.labels[key]

    def marriages_of(self, person: int) -> List[LabelNode]:
        return [lab for lab in self.labels.values() if person in lab.spouses]

    def spouses_of(self, person: int) -> List[int]:
        return [lab.two if lab.one == person else lab.one for lab in self.marriages_of(person)]

    def children_of(self, label: int) -> List[int]:
        return [link.child for link in self.parent_links if link.label == label]

    def parents_label_of(self, child: int) -> Optional[LabelNode]:
        for link in self.parent_links:
            if link.child == child:
                return self.labels[link.label]
        return None

    def is_label(self, key: int) -> bool:
        return key in self.labels

    def node_data(self) -> List[dict]:
        """All people plus one record per label node."""
        nodes = [
            {"key": p.key, "name": p.name, "sex": p.sex}
            for p in self.people.values()
        ]
        nodes.extend({"key": lab.key, "category": MARRIAGE_LINK_KEY} for lab in self.labels.values())
        return nodes

    def link_data(self) -> List[dict]:
        links = [
            {
                "from": link.one,
                "to": link.two,
                "labelKeys": [link.label],
                "category": MARRIAGE_LINK_CATEGORY,
            }
            for link in self.marriage_links
        ]
        links.extend({"from": link.label, "to": link.child} for link in self.parent_links)
        return links

    def to_igraph(self) -> ig.Graph:
        """Directed graph of people and label nodes.

        Spouses point to their label node, label nodes point to their children.
        Vertex attributes: ``key`` and ``kind`` ("person" or "label").
        """
        keys = list(self.people) + list(self.labels)
        index = {key: i for i, key in enumerate(keys)}
        edges = []
        for link in self.marriage_links:
            edges.append((index[link.one], index[link.label]))
            edges.append((index[link.two], index[link.label]))
        for link in self.parent_links:
            edges.append((index[link.label], index[link.child]))

        g = ig.Graph(n=len(keys), edges=edges, directed=True)
        g.vs["key"] = keys
        g.vs["kind"] = ["label" if key in self.labels else "person" for key in keys]
        g.vs["name"] = [str(key) for key in keys]
        return g


def _label_keys(taken) -> Iterator[int]:
    key = -1
    while True:
        if key not in taken:
            yield key
        key -= 1


def build_graph(family: Family) -> GenogramGraph:
    graph = GenogramGraph()
    log = graph.diagnostics

    for person in family.people:
        if person.key in graph.people:
            raise MalformedPersonError(f"duplicate person key {person.key}", person)
        graph.people[person.key] = person

    next_label = _label_keys(graph.people)

    # first pass: marriages
    for marriage in family.marriages:
        one, two = marriage.one, marriage.two
        if one == two:
            log.add(
                DiagnosticKind.SELF_MARRIAGE,
                f"cannot create marriage of {one} with self",
                one,
                logger=logger,
            )
            continue
        unknown = [k for k in (one, two) if k not in graph.people]
        if unknown:
            log.add(
                DiagnosticKind.UNKNOWN_PERSON,
                f"cannot create marriage of {one} with unknown person {unknown[0]}",
                one,
                two,
                logger=logger,
            )
            continue
        if graph.find_marriage(one, two) is not None:
            continue

        label = LabelNode(next(next_label), one, two)
        graph.labels[label.key] = label
        graph._pairs[marriage.pair] = label.key
        graph.marriage_links.append(MarriageLink(one, two, label.key))

    # second pass: children, once all marriages are known
    seen = set()

    def add_child(label: LabelNode, child: int):
        if (label.key, child) in seen:
            return
        seen.add((label.key, child))
        graph.parent_links.append(ParentLink(label.key, child))

    for marriage in family.marriages:
        label = graph.find_marriage(marriage.one, marriage.two)
        for child in marriage.children:
            if child not in graph.people:
                log.add(
                    DiagnosticKind.UNKNOWN_PERSON,
                    f"unknown child {child} of {marriage.one} & {marriage.two}",
                    child,
                    logger=logger,
                )
            elif label is None:
                log.add(
                    DiagnosticKind.UNRESOLVED_PARENT,
                    f"no valid marriage {marriage.one} & {marriage.two} for child {child}",
                    child,
                    logger=logger,
                )
            else:
                add_child(label, child)

    for person in family.people:
        mother, father = person.mother, person.father
        if mother is None or father is None:
            if mother is not None or father is not None:
                logger.debug(f"person {person.key} has a single known parent")
            continue

        label = graph.find_marriage(mother, father)
        if label is None:
            log.add(
                DiagnosticKind.UNKNOWN_MARRIAGE,
                f"unknown marriage: {mother} & {father}",
                person.key,
                mother,
                father,
                logger=logger,
            )
            continue
        add_child(label, person.key)

    logger.debug(
        f"built graph: {len(graph.people)} people, {len(graph.labels)} marriages, "
        f"{len(graph.parent_links)} parent links"
    )
    return graph
