# tileplan/furniture.py
import logging
import random
from typing import Dict, Iterable, List, Mapping, NamedTuple, Optional, Sequence, Set, Tuple

import numpy as np
from scipy import ndimage

from tileplan.constants import DEFAULT_FURNITURE_RULE, FURNITURE_RULES, FurnitureRule
from tileplan.geometry import Rect
from tileplan.grid import CROSS, CellGrid, CellState, Zone, classify_zones
from tileplan.model import PlacedRoom

logger = logging.getLogger(__name__)

ROTATIONS = (0, 90, 180, 270)
# unit vector each rotation faces; y grows downwards
FACING = {0: (0, -1), 90: (1, 0), 180: (0, 1), 270: (-1, 0)}
FACING_CONE = 0.5  # cos(60 deg)


class FurniturePlacement(NamedTuple):
    type: str
    x: int
    y: int
    width: int     # footprint after rotation
    height: int
    rotation: int

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    def cells(self) -> List[Tuple[int, int]]:
        return list(self.rect.cells())


def footprint(rule: FurnitureRule, rotation: int) -> Tuple[int, int]:
    if rotation in (90, 270):
        return rule.height, rule.width
    return rule.width, rule.height


def faces_toward(item: Rect, rotation: int, target: Rect) -> bool:
    (ix, iy), (tx, ty) = item.center, target.center
    dx, dy = tx - ix, ty - iy
    dist = (dx * dx + dy * dy) ** 0.5
    if dist == 0:
        return True
    fx, fy = FACING[rotation]
    return (fx * dx + fy * dy) / dist > FACING_CONE


def doorway_cells(grid: CellGrid, room: PlacedRoom) -> Set[Tuple[int, int]]:
    """Door cells of the room plus the floor cells just inside any door."""
    doors = grid.cells == CellState.DOOR
    threshold = ndimage.binary_dilation(doors, structure=CROSS) & grid.room_mask(room.index)
    blocked = {(int(x), int(y)) for y, x in np.argwhere(threshold)}
    blocked.update(room.doors)
    return blocked


class FurnitureSolver:
    """Greedy first-fit placement of requested furniture inside one room."""

    def __init__(self, rules: Mapping[str, FurnitureRule] = FURNITURE_RULES,
                 rng: Optional[random.Random] = None, default_rule: FurnitureRule = DEFAULT_FURNITURE_RULE):
        self.rules = rules
        self.rng = rng or random.Random()
        self.default_rule = default_rule

    def rule_for(self, item: str) -> FurnitureRule:
        return self.rules.get(item, self.default_rule)

    def order_items(self, items: Sequence[str]) -> List[str]:
        """Larger footprints first, stable on request order; an item that faces a requested type waits for it."""
        def area(item):
            rule = self.rule_for(item)
            return rule.width * rule.height

        ranked = [item for _, item in sorted(enumerate(items), key=lambda p: (-area(p[1]), p[0]))]
        requested = set(items)
        ordered: List[str] = []
        emitted: Set[str] = set()
        waiting: Dict[str, List[str]] = {}

        def emit(item):
            ordered.append(item)
            emitted.add(item)
            for dependent in waiting.pop(item, []):
                emit(dependent)

        for item in ranked:
            target = self.rule_for(item).faces
            if target and target != item and target in requested and target not in emitted:
                waiting.setdefault(target, []).append(item)
            else:
                emit(item)
        # facing cycles never resolve; keep their members in ranked order
        for item in ranked:
            for target, dependents in list(waiting.items()):
                if item in dependents:
                    dependents.remove(item)
                    ordered.append(item)
        return ordered

    def solve(self, grid: CellGrid, room: PlacedRoom, items: Iterable[str]) -> List[FurniturePlacement]:
        zones = classify_zones(grid, room.index)
        own = grid.room_mask(room.index)
        doorway = doorway_cells(grid, room)
        placed: List[FurniturePlacement] = []
        taken: Set[Tuple[int, int]] = set()

        for item in self.order_items(list(items)):
            rule = self.rule_for(item)
            target = next((p for p in placed if rule.faces and p.type == rule.faces), None)
            found = self._first_fit(item, rule, zones, own, doorway, taken, target)
            if found is None:
                logger.debug("No room for %s in '%s'", item, room.id)
                continue
            placed.append(found)
            taken.update(found.cells())
        return placed

    def _first_fit(self, item, rule, zones, own, doorway, taken, target) -> Optional[FurniturePlacement]:
        order = list(rule.zones) + [z for z in Zone if z not in rule.zones]
        for zone in order:
            cells = list(zones[zone])
            self.rng.shuffle(cells)
            for x, y in cells:
                for rotation in ROTATIONS:
                    w, h = footprint(rule, rotation)
                    if self._fits(x, y, w, h, own, doorway if rule.blocks_door else (), taken):
                        if target is not None and not faces_toward(Rect(x, y, w, h), rotation, target.rect):
                            continue
                        return FurniturePlacement(item, x, y, w, h, rotation)
        return None

    @staticmethod
    def _fits(x, y, w, h, own, doorway, taken) -> bool:
        if x < 0 or y < 0 or y + h > own.shape[0] or x + w > own.shape[1]:
            return False
        if not own[y:y + h, x:x + w].all():
            return False
        cells = [(cx, cy) for cy in range(y, y + h) for cx in range(x, x + w)]
        if any(c in taken for c in cells):
            return False
        return not any(c in doorway for c in cells)
