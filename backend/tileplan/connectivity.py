# tileplan/connectivity.py
import logging
import random
from typing import List, Sequence, Set, Tuple

import numpy as np
from scipy import ndimage

from tileplan.geometry import manhattan
from tileplan.grid import CROSS, CellGrid, CellState
from tileplan.model import PlacedRoom

logger = logging.getLogger(__name__)


def anchor_cell(grid: CellGrid, room: PlacedRoom) -> Tuple[int, int]:
    """The room's floor cell nearest its floor-rectangle centre."""
    cx, cy = room.floor.center_cell()
    if grid.in_bounds(cx, cy) and grid.owner[cy, cx] == room.index and grid.cells[cy, cx] == CellState.FLOOR:
        return (cx, cy)
    cells = grid.room_cells(room.index)
    if not cells:
        return (cx, cy)
    return min(cells, key=lambda c: manhattan(c, (cx, cy)))


def reachable_rooms(grid: CellGrid, rooms: Sequence[PlacedRoom], root: PlacedRoom) -> Set[int]:
    """Indices of rooms sharing a 4-connected walkable component with the root."""
    labels, _ = ndimage.label(grid.walkable(), structure=CROSS)
    x, y = anchor_cell(grid, root)
    root_label = labels[y, x]
    if root_label == 0:
        return {root.index}
    reached = set()
    for room in rooms:
        if np.any(labels[grid.owner == room.index] == root_label):
            reached.add(room.index)
    return reached


def _l_path(start: Tuple[int, int], end: Tuple[int, int], horizontal_first: bool) -> List[Tuple[int, int]]:
    (x0, y0), (x1, y1) = start, end
    sx = 1 if x1 >= x0 else -1
    sy = 1 if y1 >= y0 else -1
    if horizontal_first:
        return ([(x, y0) for x in range(x0, x1 + sx, sx)] +
                [(x1, y) for y in range(y0 + sy, y1 + sy, sy)])
    return ([(x0, y) for y in range(y0, y1 + sy, sy)] +
            [(x, y1) for x in range(x0 + sx, x1 + sx, sx)])


def _open_cell(grid: CellGrid, rooms_by_index, x: int, y: int) -> bool:
    state = grid.state(x, y)
    if state == CellState.BACKGROUND:
        grid.promote(x, y, CellState.FLOOR)
        return True
    if state == CellState.WALL:
        grid.promote(x, y, CellState.DOOR)
        for nx_, ny_ in ((x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)):
            if grid.in_bounds(nx_, ny_) and grid.cells[ny_, nx_] == CellState.FLOOR:
                owner = int(grid.owner[ny_, nx_])
                if owner in rooms_by_index:
                    rooms_by_index[owner].add_door((x, y))
        return True
    return False


def dig_path(grid: CellGrid, rooms: Sequence[PlacedRoom], start: Tuple[int, int], end: Tuple[int, int],
             width: int = 2, horizontal_first: bool = True) -> int:
    """Carves a `width`-wide L-shaped passage. Returns the number of cells opened."""
    rooms_by_index = {r.index: r for r in rooms}
    lo_x, hi_x = 1, grid.width - 1 - width
    lo_y, hi_y = 1, grid.height - 1 - width
    opened = 0
    for px, py in _l_path(start, end, horizontal_first):
        bx = min(max(px, lo_x), max(hi_x, lo_x))
        by = min(max(py, lo_y), max(hi_y, lo_y))
        for dy in range(width):
            for dx in range(width):
                x, y = bx + dx, by + dy
                if grid.in_bounds(x, y) and _open_cell(grid, rooms_by_index, x, y):
                    opened += 1
    return opened


def repair_connectivity(grid: CellGrid, rooms: Sequence[PlacedRoom], root: PlacedRoom,
                        rng: random.Random, width: int = 2) -> List[Tuple[str, str]]:
    """Digs passages until every room is reachable from the root. Returns (from, to) id pairs dug."""
    dug = []
    for _ in range(len(rooms)):
        reached = reachable_rooms(grid, rooms, root)
        stranded = [r for r in rooms if r.index not in reached]
        if not stranded:
            break
        anchors = {r.index: anchor_cell(grid, r) for r in rooms}
        linked = [r for r in rooms if r.index in reached]
        room, target = min(((s, t) for s in stranded for t in linked),
                           key=lambda p: manhattan(anchors[p[0].index], anchors[p[1].index]))
        dig_path(grid, rooms, anchors[room.index], anchors[target.index], width, rng.random() < 0.5)
        logger.info("Dug passage from '%s' to '%s' to restore reachability", room.id, target.id)
        dug.append((room.id, target.id))
    return dug
