"""Layered layout of a genogram.

``GenogramLayout.do_layout`` runs the whole pipeline on a fresh network every
time: make the network, assign layers, stretch every vertex to its layer's
size, order the vertices inside each layer with igraph's Sugiyama crossing
reduction, assign coordinates, then split couples back into spouses.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .builder import GenogramGraph
from .config import LayoutConfig
from .diagnostics import DiagnosticLog
from .layering import assign_layers, break_cycles, normalize_layer_sizes
from .network import DUMMY, LayoutNetwork, LayoutVertex, make_network
from .positioner import EdgeRoute, NodePlacement, commit_nodes, route_edges

logger = logging.getLogger(__name__)


@dataclass
class LayoutResult:
    placements: Dict[int, NodePlacement] = field(default_factory=dict)
    # node key (person or label) -> generation
    layers: Dict[int, int] = field(default_factory=dict)
    # label key -> (left spouse, right spouse)
    spouse_order: Dict[int, Tuple[int, int]] = field(default_factory=dict)
    routes: List[EdgeRoute] = field(default_factory=list)
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)

    def layer_of(self, key: int) -> Optional[int]:
        return self.layers.get(key)

    def bounds(self) -> Tuple[float, float, float, float]:
        """(min_x, min_y, max_x, max_y) over all placed nodes."""
        if not self.placements:
            return (0.0, 0.0, 0.0, 0.0)
        boxes = self.placements.values()
        return (
            min(p.x for p in boxes),
            min(p.y for p in boxes),
            max(p.right for p in boxes),
            max(p.bottom for p in boxes),
        )


class GenogramLayout:
    def __init__(self, config: LayoutConfig = None):
        self.config = config or LayoutConfig()
        self.network: Optional[LayoutNetwork] = None

    def do_layout(self, graph: GenogramGraph, sizes: dict = None) -> LayoutResult:
        diagnostics = DiagnosticLog()
        diagnostics.extend(graph.diagnostics)

        # no state survives from a previous run
        self.network = make_network(graph, sizes, self.config)
        break_cycles(self.network, diagnostics)
        layer_count = assign_layers(self.network, diagnostics)
        normalize_layer_sizes(self.network, self.config.horizontal)

        order = self.order_layers(layer_count)
        self.assign_coordinates(order)

        placements, spouse_order = commit_nodes(self.network, graph, self.config, diagnostics)
        routes = route_edges(graph, placements, self.config.direction)

        result = LayoutResult(
            placements=placements,
            layers=self.node_layers(),
            spouse_order=spouse_order,
            routes=routes,
            diagnostics=diagnostics,
        )
        logger.debug(
            f"layout: {len(self.network.vertices)} vertices in {layer_count} layers, "
            f"{len(diagnostics)} diagnostics"
        )
        return result

    def node_layers(self) -> Dict[int, int]:
        layers = {}
        for v in self.network.vertices:
            if v.node is not None:
                layers[v.node] = v.layer
        # married people live in the layer of their marriage
        for couple in self.network.couples.values():
            layer = self.network.vertices[couple.vertex].layer
            layers.setdefault(couple.one, layer)
            layers.setdefault(couple.two, layer)
        return layers

    def order_layers(self, layer_count: int) -> List[List[LayoutVertex]]:
        """Vertices of each layer, left to right, with few edge crossings."""
        net = self.network
        if not net.vertices:
            return []

        g = net.to_igraph()
        layout = g.layout_sugiyama(
            layers=[v.layer for v in net.vertices],
            maxiter=self.config.crossing_iterations,
        )
        # the layout may carry extra rows for the dummy vertices of long edges
        coords = layout.coords[: g.vcount()]

        by_layer = defaultdict(list)
        for v in net.vertices:
            by_layer[v.layer].append(v)
        return [
            sorted(by_layer[layer], key=lambda v: (coords[v.id][0], v.id))
            for layer in range(layer_count)
        ]

    # -- coordinates --------------------------------------------------------

    def _thickness(self, v: LayoutVertex) -> float:
        return v.width if self.config.horizontal else v.height

    def _breadth(self, v: LayoutVertex) -> float:
        return v.height if self.config.horizontal else v.width

    def _focus(self, v: LayoutVertex) -> float:
        return v.focus_y if self.config.horizontal else v.focus_x

    def _pack(self, layer: List[LayoutVertex], cross: Dict[int, float], wanted: Dict[int, float]):
        edge = None
        for v in layer:
            if v.kind == DUMMY:
                continue
            pos = wanted.get(v.id, cross.get(v.id, 0.0))
            if edge is not None:
                pos = max(pos, edge + self.config.column_spacing)
            cross[v.id] = pos
            edge = pos + self._breadth(v)

    def _barycenters(self, layer, neighbours, cross) -> Dict[int, float]:
        wanted = {}
        for v in layer:
            others = [n for n in neighbours(v) if n.id in cross]
            if others:
                mean = sum(cross[n.id] + self._focus(n) for n in others) / len(others)
                wanted[v.id] = mean - self._focus(v)
        return wanted

    def assign_coordinates(self, order: List[List[LayoutVertex]]):
        net = self.network
        cfg = self.config
        if not order:
            return

        layer_pos = []
        pos = 0.0
        for layer in order:
            layer_pos.append(pos)
            pos += max(self._thickness(v) for v in layer) + cfg.layer_spacing
        extent = pos - cfg.layer_spacing

        cross = {}
        for layer in order:
            self._pack(layer, cross, {})
        # parents pull children, then children pull parents
        for layer in order[1:]:
            self._pack(layer, cross, self._barycenters(layer, net.predecessors, cross))
        for layer in reversed(order[:-1]):
            self._pack(layer, cross, self._barycenters(layer, net.successors, cross))

        for v in net.dummies():
            successors = [s for s in net.successors(v) if s.id in cross]
            if successors:
                cross[v.id] = sum(cross[s.id] + self._focus(s) for s in successors) / len(successors)
            else:
                cross[v.id] = 0.0

        shift = min((cross[v.id] for v in net.vertices if v.kind != DUMMY), default=0.0)
        for layer, lpos in zip(order, layer_pos):
            for v in layer:
                c = cross[v.id] - shift
                if cfg.direction == 90:
                    v.x, v.y = c, lpos
                elif cfg.direction == 270:
                    v.x, v.y = c, extent - lpos - v.height
                elif cfg.direction == 0:
                    v.x, v.y = lpos, c
                else:
                    v.x, v.y = extent - lpos - v.width, c


def layout_family(graph: GenogramGraph, config: LayoutConfig = None, sizes: dict = None) -> LayoutResult:
    return GenogramLayout(config).do_layout(graph, sizes)
