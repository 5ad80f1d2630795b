# tileplan/geometric.py
import logging
import random
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import shapely
from shapely.affinity import scale
from shapely.geometry import Point

from tileplan.assembly import assemble_tilemap, furnish_rooms
from tileplan.connectivity import repair_connectivity
from tileplan.constants import FALLBACK_FURNISHING, GEOMETRIC_FURNISHINGS, GEOMETRIC_WALL_SPRITE, HALL_FLOOR_SPRITE
from tileplan.furniture import FurniturePlacement, FurnitureSolver
from tileplan.geometry import Rect
from tileplan.grid import CellGrid
from tileplan.model import PlacedRoom
from tileplan.raster import skin_walls
from tileplan.schema import RoomGraph, TileMap, parse_room_graph
from tileplan.settings import GenerationSettings

logger = logging.getLogger(__name__)

CENTER_ROOM = 8
SLOT = 6
SLOT_GAP = 3        # between the centre room and a side column
ROW_GAP = 2
MIN_SIDE = 4        # rooms shrink down to this to stay inside the hull


def ellipse_hull(width: int, height: int):
    cx, cy = width // 2, height // 2
    rx, ry = width // 2 - 2, height // 2 - 4
    return scale(Point(cx, cy).buffer(1.0, quad_segs=32), rx, ry)


def hull_mask(hull, width: int, height: int) -> np.ndarray:
    xs, ys = np.meshgrid(np.arange(width), np.arange(height))
    return shapely.intersects_xy(hull, xs, ys)


def _inside(rect: Rect, inside: np.ndarray) -> bool:
    if not rect.within(inside.shape[1], inside.shape[0]) or rect.area == 0:
        return False
    return bool(inside[rect.y:rect.bottom, rect.x:rect.right].all())


def fit_in_slot(slot: Rect, w: int, h: int, inside: np.ndarray, toward: Tuple[float, float]) -> Optional[Rect]:
    """Largest room of at most w x h that lies wholly inside the hull, as close to `toward` as the slot allows."""
    sizes = [(ww, hh) for ww in range(w, min(w, MIN_SIDE) - 1, -1) for hh in range(h, min(h, MIN_SIDE) - 1, -1)]
    sizes.sort(key=lambda s: -s[0] * s[1])
    tx, ty = toward
    for ww, hh in sizes:
        spots = [Rect(x, y, ww, hh) for y in range(slot.y, slot.bottom - hh + 1)
                 for x in range(slot.x, slot.right - ww + 1)]
        spots.sort(key=lambda r: abs(r.center[0] - tx) + abs(r.center[1] - ty))
        for rect in spots:
            if _inside(rect, inside):
                return rect
    return None


def _usable(slot: Rect, center: Rect, inside: np.ndarray) -> bool:
    return fit_in_slot(slot, SLOT, SLOT, inside, center.center) is not None


def side_slots(center: Rect, inside: np.ndarray) -> List[Tuple[Rect, Rect]]:
    """(left, right) slot pairs in rows spreading out from the centre row."""
    H = inside.shape[0]
    left_x = center.x - SLOT_GAP - SLOT
    right_x = center.right + SLOT_GAP
    y0 = center.y + (center.h - SLOT) // 2
    ys = [y0]
    for k in range(1, H):
        step = k * (SLOT + ROW_GAP)
        if y0 - step < 1 and y0 + step + SLOT > H - 1:
            break
        ys.extend([y0 - step, y0 + step])
    rows = []
    for y in ys:
        pair = (Rect(left_x, y, SLOT, SLOT), Rect(right_x, y, SLOT, SLOT))
        if all(_usable(r, center, inside) for r in pair):
            rows.append(pair)
    return rows


def axis_slots(center: Rect, inside: np.ndarray) -> List[Rect]:
    """Single slots stacked above and below the centre room; each is its own mirror image."""
    H = inside.shape[0]
    x = center.x + (center.w - SLOT) // 2
    above = center.y - ROW_GAP - SLOT
    below = center.bottom + ROW_GAP
    slots = []
    while above >= 0 or below + SLOT <= H:
        for y in (above, below):
            slot = Rect(x, y, SLOT, SLOT)
            if _usable(slot, center, inside):
                slots.append(slot)
        above -= SLOT + ROW_GAP
        below += SLOT + ROW_GAP
    return slots


class GeometricGenerator:
    """Elliptical hall with a central room and symmetric side rooms."""
    style = "geometric"
    strategy = "symmetric"

    def __init__(self, settings: Optional[GenerationSettings] = None, rng: Optional[random.Random] = None):
        self.settings = settings or GenerationSettings()
        self.rng = rng or random.Random()
        self.placed: List[PlacedRoom] = []
        self.furniture: Dict[str, List[FurniturePlacement]] = {}
        self.anchor_id: Optional[str] = None
        self.grid: Optional[CellGrid] = None

    def layout(self, graph: RoomGraph, inside: np.ndarray) -> List[PlacedRoom]:
        W, H = graph.width, graph.height
        first, rest = graph.rooms[0], graph.rooms[1:]
        cw = min(first.width or CENTER_ROOM, W // 2)
        ch = min(first.height or CENTER_ROOM, H // 2)
        center = Rect(W // 2 - cw // 2, H // 2 - ch // 2, cw, ch)
        placed = [PlacedRoom(0, first, center, floor=center)]

        rows = side_slots(center, inside)
        axis = axis_slots(center, inside)
        # a twin costs a second slot; listed rooms come first
        twins = 0
        if self.settings.mirror:
            twins = max(0, min(len(rows), 2 * len(rows) + len(axis) - len(rest)))
        pairs = rows[:twins]
        singles = axis + [r for pair in rows[twins:] for r in pair]

        for spec, (primary, twin) in zip(rest, pairs):
            placed.append(self._fit(len(placed), spec, primary, center, inside))
            placed.append(self._fit(len(placed), spec, twin, center, inside,
                                    room_id=f"{spec.id}_mirror", listed=False))
        for spec, slot in zip(rest[twins:], singles):
            placed.append(self._fit(len(placed), spec, slot, center, inside))
        for spec in rest[twins + len(singles):]:
            logger.warning("Dropping room '%s': hull has no free slot left", spec.id)
        return placed

    @staticmethod
    def _fit(index, spec, slot: Rect, center: Rect, inside: np.ndarray, room_id=None, listed=True) -> PlacedRoom:
        w, h = min(spec.width or SLOT, SLOT), min(spec.height or SLOT, SLOT)
        # slots are only offered when a MIN_SIDE room fits, so this always finds a spot
        rect = fit_in_slot(slot, w, h, inside, center.center)
        return PlacedRoom(index, spec, rect, floor=rect, room_id=room_id, listed=listed)

    def generate(self, graph: Any) -> TileMap:
        graph = parse_room_graph(graph)
        s = self.settings
        W, H = graph.width, graph.height
        inside = hull_mask(ellipse_hull(W, H), W, H)

        grid = CellGrid(W, H)
        grid.paint_floor(inside)
        self.placed = self.layout(graph, inside)
        for room in self.placed:
            f = room.floor
            mask = np.zeros((H, W), dtype=bool)
            mask[f.y:f.bottom, f.x:f.right] = True
            grid.paint_floor(mask & inside, room.index)
        root = self.placed[0]
        self.anchor_id = root.id

        skin_walls(grid)
        repair_connectivity(grid, self.placed, root, self.rng, s.corridor_width)
        skin_walls(grid)
        self.grid = grid

        solver = FurnitureSolver(s.furniture_rules, self.rng, s.default_rule)
        self.furniture = furnish_rooms(grid, self.placed, solver, GEOMETRIC_FURNISHINGS,
                                       FALLBACK_FURNISHING[self.style], s.furnish_empty_rooms)
        tilemap = assemble_tilemap(grid, self.placed, self.furniture, GEOMETRIC_WALL_SPRITE,
                                   lambda x, y: HALL_FLOOR_SPRITE)
        logger.info("Geometric layout: rooms=%d/%d mirrored=%s", sum(r.listed for r in self.placed),
                    len(graph.rooms), s.mirror)
        return tilemap
