"""Generation layers for the layout network.

Layers come from a longest-path layering over the network (sources at layer 0,
every other vertex one below its deepest predecessor). The successors of each
cohort dummy are then pulled down to a common layer so that all marriages of a
multiply-married person share a generation.
"""

import logging
from collections import defaultdict
from typing import List, Optional

import igraph as ig

from .diagnostics import DiagnosticKind, DiagnosticLog
from .network import LayoutNetwork

logger = logging.getLogger(__name__)


def break_cycles(network: LayoutNetwork, diagnostics: DiagnosticLog) -> List[int]:
    """Drop a feedback arc set so the network becomes a DAG.

    Returns the indices of the dropped edges.
    """
    g = network.to_igraph()
    if g.is_dag():
        return []

    fas = sorted(g.feedback_arc_set(None, "eades"))
    for eid in fas:
        edge = network.edges[eid]
        source = network.vertices[edge.source].node
        target = network.vertices[edge.target].node
        diagnostics.add(
            DiagnosticKind.CYCLE,
            f"ancestry cycle: dropped edge {source} -> {target}",
            *(k for k in (source, target) if k is not None),
            logger=logger,
        )
    network.remove_edges(fas)
    return fas


def longest_path_layers(g: ig.Graph) -> List[int]:
    layers = [0] * g.vcount()
    for v in g.topological_sorting(mode="out"):
        for w in g.successors(v):
            layers[w] = max(layers[w], layers[v] + 1)
    return layers


def align_groups(g: ig.Graph, layers: List[int], groups: List[List[int]]) -> Optional[List[int]]:
    """Push every group onto one layer, keeping edges pointing downwards.

    Returns None when no such layering exists, i.e. when a group contains a
    vertex and one of its descendants.
    """
    layers = list(layers)
    order = g.topological_sorting(mode="out")
    limit = g.vcount()
    changed = True
    while changed:
        changed = False
        for group in groups:
            top = max(layers[v] for v in group)
            for v in group:
                if layers[v] < top:
                    layers[v] = top
                    changed = True
        for v in order:
            for w in g.successors(v):
                if layers[w] <= layers[v]:
                    layers[w] = layers[v] + 1
                    changed = True
        # a valid layering never needs more layers than vertices
        if max(layers, default=0) >= limit:
            return None
    return layers


def compact(layers: List[int]) -> List[int]:
    """Renumber layers to 0..k-1 without gaps, keeping their order."""
    index = {layer: i for i, layer in enumerate(sorted(set(layers)))}
    return [index[layer] for layer in layers]


def assign_layers(network: LayoutNetwork, diagnostics: DiagnosticLog) -> int:
    """Set ``layer`` on every vertex and return the number of layers."""
    if not network.vertices:
        return 0

    g = network.to_igraph()
    layers = longest_path_layers(g)

    dummies = [v.id for v in network.dummies()]
    groups = [g.successors(d) for d in dummies]
    groups = [group for group in groups if group]
    if groups:
        aligned = align_groups(g, layers, groups)
        if aligned is None:
            diagnostics.add(
                DiagnosticKind.COHORT_CONFLICT,
                "marriages of a cohort span ancestor and descendant; keeping their own generations",
                logger=logger,
            )
        else:
            layers = aligned

    # each dummy sits right above its earliest marriage
    for d in dummies:
        successors = g.successors(d)
        if successors:
            layers[d] = min(layers[s] for s in successors) - 1

    layers = compact(layers)
    for vertex, layer in zip(network.vertices, layers):
        vertex.layer = layer
    return max(layers) + 1


def normalize_layer_sizes(network: LayoutNetwork, horizontal: bool):
    """Give every vertex of a layer the layer's largest extent along the layout axis.

    Vertices are anchored at their left edge (horizontal) or top edge (vertical).
    """
    maxsizes = defaultdict(float)
    for v in network.vertices:
        size = v.width if horizontal else v.height
        maxsizes[v.layer] = max(maxsizes[v.layer], size)

    for v in network.vertices:
        if horizontal:
            v.focus_x, v.focus_y = 0.0, v.height / 2
            v.width = maxsizes[v.layer]
        else:
            v.focus_x, v.focus_y = v.width / 2, 0.0
            v.height = maxsizes[v.layer]
