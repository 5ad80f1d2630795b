# tileplan/raster.py
import logging
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np
from scipy import ndimage

from tileplan.geometry import door_cells, shared_wall
from tileplan.grid import CellGrid, CellState
from tileplan.model import PlacedRoom

logger = logging.getLogger(__name__)

RING = np.ones((3, 3), dtype=bool)


def rasterize(grid: CellGrid, rooms: Iterable[PlacedRoom]):
    """Paints each room's floor rectangle and records ownership."""
    for room in rooms:
        f = room.floor
        mask = np.zeros_like(grid.cells, dtype=bool)
        mask[max(f.y, 0):f.bottom, max(f.x, 0):f.right] = True
        grid.paint_floor(mask, room.index)


def skin_walls(grid: CellGrid) -> int:
    """Background cells 8-adjacent to floor become wall. Returns how many were added."""
    floor = grid.cells == CellState.FLOOR
    near = ndimage.binary_dilation(floor, structure=RING)
    return grid.promote_where(near & ~floor, CellState.WALL)


def carve_doors(grid: CellGrid, rooms: Sequence[PlacedRoom], connections: Iterable[Tuple[str, str]],
                door_width: int = 2) -> List[Tuple[str, str]]:
    """Opens a centred door for every connection whose rooms share a long enough wall.

    Returns the connections left without a door; connectivity repair handles those.
    """
    by_id: Dict[str, PlacedRoom] = {r.id: r for r in rooms}
    missing = []
    for a_id, b_id in connections:
        a, b = by_id.get(a_id), by_id.get(b_id)
        if a is None or b is None:
            continue
        contact = shared_wall(a.rect, b.rect)
        cells = door_cells(contact, door_width) if contact else []
        if not cells:
            logger.debug("No shared wall between '%s' and '%s'", a_id, b_id)
            missing.append((a_id, b_id))
            continue
        for x, y in cells:
            if grid.state(x, y) == CellState.WALL:
                grid.promote(x, y, CellState.DOOR)
            a.add_door((x, y))
            b.add_door((x, y))
    return missing
