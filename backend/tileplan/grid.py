# tileplan/grid.py
from enum import Enum, IntEnum
from typing import Dict, List, Tuple

import numpy as np


class CellState(IntEnum):
    BACKGROUND = 0
    FLOOR = 1
    WALL = 2
    DOOR = 3


# cells only ever move forward through this table
PROMOTIONS = {
    CellState.BACKGROUND: frozenset({CellState.FLOOR, CellState.WALL}),
    CellState.FLOOR: frozenset(),
    CellState.WALL: frozenset({CellState.DOOR}),
    CellState.DOOR: frozenset(),
}

NO_OWNER = -1
CROSS = np.array([[0, 1, 0], [1, 1, 1], [0, 1, 0]], dtype=bool)


class Zone(str, Enum):
    WALL_ADJACENT = "wall"
    INTERIOR = "center"


class CellGrid:
    """Width x height cell states plus the index of the room that owns each floor cell."""

    def __init__(self, width: int, height: int):
        self.width, self.height = width, height
        self.cells = np.zeros((height, width), dtype=np.int8)
        self.owner = np.full((height, width), NO_OWNER, dtype=np.int16)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def state(self, x: int, y: int) -> CellState:
        return CellState(int(self.cells[y, x]))

    def promote(self, x: int, y: int, new_state: CellState) -> bool:
        """Moves one cell forward. Returns False if it already holds new_state."""
        current = self.state(x, y)
        if current == new_state:
            return False
        if new_state not in PROMOTIONS[current]:
            raise ValueError(f"illegal cell promotion at ({x}, {y}): {current.name} -> {new_state.name}")
        self.cells[y, x] = new_state
        return True

    def promote_where(self, mask: np.ndarray, new_state: CellState) -> int:
        """Promotes every masked cell whose current state may legally become new_state."""
        sources = [s for s, targets in PROMOTIONS.items() if new_state in targets]
        eligible = mask & np.isin(self.cells, sources)
        self.cells[eligible] = new_state
        return int(eligible.sum())

    def paint_floor(self, mask: np.ndarray, owner: int = NO_OWNER) -> int:
        """Background -> Floor over mask; every masked floor cell takes the given owner."""
        count = self.promote_where(mask, CellState.FLOOR)
        self.owner[mask & (self.cells == CellState.FLOOR)] = owner
        return count

    def walkable(self) -> np.ndarray:
        return (self.cells == CellState.FLOOR) | (self.cells == CellState.DOOR)

    def room_mask(self, index: int) -> np.ndarray:
        return (self.owner == index) & (self.cells == CellState.FLOOR)

    def room_cells(self, index: int) -> List[Tuple[int, int]]:
        return [(int(x), int(y)) for y, x in np.argwhere(self.room_mask(index))]

    def count(self, state: CellState) -> int:
        return int((self.cells == state).sum())


def classify_zones(grid: CellGrid, index: int) -> Dict[Zone, List[Tuple[int, int]]]:
    """Splits a room's floor into cells touching anything other than its own floor and the rest."""
    own = grid.room_mask(index)
    padded = np.pad(own, 1, constant_values=False)
    surrounded = (padded[:-2, 1:-1] & padded[2:, 1:-1] & padded[1:-1, :-2] & padded[1:-1, 2:])
    interior = own & surrounded
    edge = own & ~surrounded
    return {
        Zone.WALL_ADJACENT: [(int(x), int(y)) for y, x in np.argwhere(edge)],
        Zone.INTERIOR: [(int(x), int(y)) for y, x in np.argwhere(interior)],
    }
