# tileplan/strategies.py
import logging
import random
import re
from typing import Dict, List, Optional, Sequence, Tuple

import networkx as nx

from tileplan.constants import HUB_PATTERN, SPINE_PATTERN, default_room_size
from tileplan.geometry import Rect
from tileplan.model import PlacedRoom
from tileplan.placement import can_attach, snap
from tileplan.schema import RoomSpec

logger = logging.getLogger(__name__)

SPINE, HUB, CLUSTER, BSP = "spine", "hub", "cluster", "bsp"
HINT_PATTERN = re.compile(r"\b(spine|hub|cluster|bsp)\b")


# === Connection graph & sizing ===
def connection_graph(rooms: Sequence[RoomSpec]) -> nx.Graph:
    """Undirected graph of declared connections; one-sided declarations count."""
    G = nx.Graph()
    ids = {r.id for r in rooms}
    for r in rooms:
        G.add_node(r.id)
    for r in rooms:
        for target in r.connections:
            if target != r.id and target in ids:
                G.add_edge(r.id, target)
    return G


def floor_size(spec: RoomSpec) -> Tuple[int, int]:
    dw, dh = default_room_size(spec.type)
    return (spec.width or dw, spec.height or dh)


def outer_size(spec: RoomSpec, canvas_w: int, canvas_h: int) -> Tuple[int, int]:
    w, h = floor_size(spec)
    return (max(3, min(w + 2, canvas_w)), max(3, min(h + 2, canvas_h)))


def _matches(pattern, spec: RoomSpec) -> bool:
    return bool(pattern.search(spec.type) or pattern.search(spec.name.lower()))


def _largest(rooms: Sequence[RoomSpec]) -> RoomSpec:
    # max() keeps the first of equal candidates, so input order breaks ties
    return max(rooms, key=lambda r: floor_size(r)[0] * floor_size(r)[1])


def _spine_anchor(rooms, G) -> Optional[RoomSpec]:
    for r in rooms:
        w, h = floor_size(r)
        if _matches(SPINE_PATTERN, r) and (G.degree(r.id) > 1 or Rect(0, 0, w, h).aspect_ratio() > 2):
            return r
    return None


def _hub_anchor(rooms, G) -> Optional[RoomSpec]:
    return next((r for r in rooms if _matches(HUB_PATTERN, r) and G.degree(r.id) >= 2), None)


def select_strategy(rooms: Sequence[RoomSpec], hint: Optional[str] = None,
                    graph: Optional[nx.Graph] = None) -> Tuple[str, str]:
    """Returns (strategy, anchor room id). Never fails: Cluster is the fallback."""
    G = graph if graph is not None else connection_graph(rooms)
    named = HINT_PATTERN.search(hint.lower()) if hint else None
    if named:
        strategy = named.group(1)
        if strategy == SPINE:
            anchor = _spine_anchor(rooms, G) or next((r for r in rooms if _matches(SPINE_PATTERN, r)), None)
        elif strategy == HUB:
            anchor = _hub_anchor(rooms, G) or next((r for r in rooms if _matches(HUB_PATTERN, r)), None)
        else:
            anchor = None
        return strategy, (anchor or _largest(rooms)).id

    anchor = _spine_anchor(rooms, G)
    if anchor:
        return SPINE, anchor.id
    anchor = _hub_anchor(rooms, G)
    if anchor:
        return HUB, anchor.id
    return CLUSTER, _largest(rooms).id


# === Shared placement state ===
class LayoutBuilder:
    def __init__(self, rooms: Sequence[RoomSpec], width: int, height: int, rng: random.Random,
                 door_width: int = 2, graph: Optional[nx.Graph] = None):
        self.width, self.height, self.rng, self.door_width = width, height, rng, door_width
        self.specs: Dict[str, RoomSpec] = {r.id: r for r in rooms}
        self.order = [r.id for r in rooms]
        self.graph = graph if graph is not None else connection_graph(rooms)
        self.sizes = {r.id: outer_size(r, width, height) for r in rooms}
        self.placed: Dict[str, Rect] = {}

    def place(self, room_id: str, rect: Rect):
        self.placed[room_id] = rect

    def centered(self, room_id: str) -> Rect:
        w, h = self.sizes[room_id]
        return Rect((self.width - w) // 2, (self.height - h) // 2, w, h)

    def neighbors(self, room_id: str) -> List[str]:
        near = set(self.graph.neighbors(room_id))
        return [rid for rid in self.order if rid in near]

    def breadth_order(self, anchor_id: str) -> List[str]:
        """Anchor's component in breadth-first order, then every other room in input order."""
        reached = [anchor_id]
        seen = {anchor_id}
        for parent, child in nx.bfs_edges(self.graph, anchor_id, sort_neighbors=self._input_order):
            if child not in seen:
                seen.add(child)
                reached.append(child)
        return reached + [rid for rid in self.order if rid not in seen]

    def _input_order(self, nodes):
        nodes = set(nodes)
        return [rid for rid in self.order if rid in nodes]

    def try_attach(self, room_id: str, parent_id: str, rect: Rect) -> bool:
        if can_attach(self.placed[parent_id], rect, self.placed.values(), self.width, self.height, self.door_width):
            self.place(room_id, rect)
            return True
        return False

    def try_snap(self, room_id: str, parents: Sequence[str]) -> bool:
        for pid in parents:
            rect = snap(self.placed[pid], self.sizes[room_id], self.placed.values(),
                        self.width, self.height, self.rng, self.door_width)
            if rect is not None:
                self.place(room_id, rect)
                return True
        return False

    def attach_remaining(self, anchor_id: str):
        """Breadth-order passes against placed graph neighbours, then any placed room."""
        pending = [rid for rid in self.breadth_order(anchor_id) if rid not in self.placed]
        progress = True
        while pending and progress:
            progress = False
            for rid in list(pending):
                parents = [n for n in self.neighbors(rid) if n in self.placed]
                if parents and self.try_snap(rid, parents):
                    pending.remove(rid)
                    progress = True
        for rid in pending:
            parents = list(self.placed)
            self.rng.shuffle(parents)
            if not self.try_snap(rid, parents):
                logger.warning("Dropping room '%s': no free position next to any placed room", rid)

    def result(self) -> List[PlacedRoom]:
        placed = [rid for rid in self.order if rid in self.placed]
        return [PlacedRoom(i, self.specs[rid], self.placed[rid]) for i, rid in enumerate(placed)]


# === Spine ===
def _spine_slot(spine: Rect, side: int, cursor: int, w: int, h: int, horizontal: bool) -> Rect:
    if horizontal:
        return Rect(cursor, spine.y - h + 1, w, h) if side == 0 else Rect(cursor, spine.bottom - 1, w, h)
    return Rect(spine.x - w + 1, cursor, w, h) if side == 0 else Rect(spine.right - 1, cursor, w, h)


def layout_spine(builder: LayoutBuilder, anchor_id: str):
    spine = builder.centered(anchor_id)
    builder.place(anchor_id, spine)
    horizontal = spine.w >= spine.h
    start = spine.x if horizontal else spine.y
    cursors = [start, start]
    side = 0
    for rid in builder.neighbors(anchor_id):
        w, h = builder.sizes[rid]
        for s in (side, 1 - side):
            rect = _spine_slot(spine, s, cursors[s], w, h, horizontal)
            if builder.try_attach(rid, anchor_id, rect):
                # neighbours share their side walls
                cursors[s] += (w if horizontal else h) - 1
                side = 1 - s
                break
        else:
            builder.try_snap(rid, [anchor_id])
    builder.attach_remaining(anchor_id)


# === Hub ===
def hub_slots(hub: Rect, w: int, h: int) -> List[Rect]:
    """Eight side and corner positions clockwise from north."""
    mid_x = hub.x + (hub.w - w) // 2
    mid_y = hub.y + (hub.h - h) // 2
    north, south = hub.y - h + 1, hub.bottom - 1
    west, east = hub.x - w + 1, hub.right - 1
    return [
        Rect(mid_x, north, w, h),
        Rect(hub.right - w, north, w, h),
        Rect(east, mid_y, w, h),
        Rect(east, hub.bottom - h, w, h),
        Rect(mid_x, south, w, h),
        Rect(hub.x, south, w, h),
        Rect(west, mid_y, w, h),
        Rect(west, hub.y, w, h),
    ]


def layout_hub(builder: LayoutBuilder, anchor_id: str):
    hub = builder.centered(anchor_id)
    builder.place(anchor_id, hub)
    spokes = builder.neighbors(anchor_id)
    for i, rid in enumerate(spokes):
        slots = hub_slots(hub, *builder.sizes[rid])
        first = (i * len(slots)) // len(spokes)
        if not any(builder.try_attach(rid, anchor_id, slots[(first + k) % len(slots)]) for k in range(len(slots))):
            builder.try_snap(rid, [anchor_id])
    builder.attach_remaining(anchor_id)


# === Cluster ===
def layout_cluster(builder: LayoutBuilder, anchor_id: str):
    builder.place(anchor_id, builder.centered(anchor_id))
    for rid in builder.breadth_order(anchor_id):
        if rid in builder.placed:
            continue
        near = [n for n in builder.neighbors(rid) if n in builder.placed]
        others = [p for p in builder.placed if p not in near]
        builder.rng.shuffle(near)
        builder.rng.shuffle(others)
        if not builder.try_snap(rid, near + others):
            logger.warning("Skipping room '%s': cluster has no free edge for it", rid)


LAYOUTS = {SPINE: layout_spine, HUB: layout_hub, CLUSTER: layout_cluster}
