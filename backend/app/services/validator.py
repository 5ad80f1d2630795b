from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np
from scipy import ndimage

from tileplan.constants import DEFAULT_FURNITURE_RULE, FURNITURE_RULES, FurnitureRule
from tileplan.furniture import FurniturePlacement
from tileplan.geometry import Rect
from tileplan.grid import CROSS
from tileplan.schema import RoomData, TileMap


def _bounds(room: RoomData) -> Rect:
    return Rect(room.x, room.y, room.width, room.height)


def walkable_mask(tilemap: TileMap) -> np.ndarray:
    """Cells carrying a floor-layer tile (room floor, passages and doors)."""
    mask = np.zeros((tilemap.height, tilemap.width), dtype=bool)
    for t in tilemap.tiles:
        if t.layer == "floor" and 0 <= t.x < tilemap.width and 0 <= t.y < tilemap.height:
            mask[t.y, t.x] = True
    return mask


def unreachable_rooms(tilemap: TileMap, root_id: Optional[str] = None) -> List[str]:
    if not tilemap.rooms:
        return []
    root = tilemap.room(root_id) if root_id else tilemap.rooms[0]
    if root is None:
        return [root_id]
    labels, _ = ndimage.label(walkable_mask(tilemap), structure=CROSS)

    def labels_of(room):
        b = _bounds(room)
        region = labels[max(b.y, 0):b.bottom, max(b.x, 0):b.right]
        return set(np.unique(region[region > 0]).tolist())

    reached = labels_of(root)
    return [r.id for r in tilemap.rooms if not (labels_of(r) & reached)]


def validate_tilemap(tilemap: TileMap, furniture: Optional[Mapping[str, Iterable[FurniturePlacement]]] = None,
                     root_id: Optional[str] = None, room_ids: Optional[Iterable[str]] = None,
                     rules: Mapping[str, FurnitureRule] = FURNITURE_RULES) -> Tuple[bool, List[str]]:
    """Validates a generated TileMap (and optionally its furniture placements)."""
    errors: List[str] = []
    W, H = tilemap.width, tilemap.height

    # 1) In-bounds + positive size
    for r in tilemap.rooms:
        b = _bounds(r)
        if b.w <= 0 or b.h <= 0:
            errors.append(f"{r.id} has non-positive size.")
        if not b.within(W, H):
            errors.append(f"{r.id} is out of canvas bounds.")
    for t in tilemap.tiles:
        if not (0 <= t.x < W and 0 <= t.y < H):
            errors.append(f"{t.sprite} tile at ({t.x}, {t.y}) is off the canvas.")

    # 2) Interior overlaps
    polys = [(r.id, _bounds(r).to_polygon()) for r in tilemap.rooms]
    for i in range(len(polys)):
        for j in range(i + 1, len(polys)):
            if polys[i][1].intersection(polys[j][1]).area > 0:
                errors.append(f"{polys[i][0]} overlaps with {polys[j][0]}.")

    # 3) Output ids are a subset of the input ids
    if room_ids is not None:
        known = set(room_ids)
        for r in tilemap.rooms:
            if r.id not in known:
                errors.append(f"{r.id} is not a requested room.")

    # 4) Reachability from the root
    for rid in unreachable_rooms(tilemap, root_id):
        errors.append(f"{rid} is not reachable from {root_id or tilemap.rooms[0].id}.")

    # 5) Furniture overlap and door blocking
    doors: Dict[str, set] = {r.id: {(d.x, d.y) for d in r.doors} for r in tilemap.rooms}
    for rid, items in (furniture or {}).items():
        items = list(items)
        for i in range(len(items)):
            for j in range(i + 1, len(items)):
                if items[i].rect.overlaps(items[j].rect):
                    errors.append(f"{items[i].type} overlaps with {items[j].type} in {rid}.")
        for item in items:
            rule = rules.get(item.type, DEFAULT_FURNITURE_RULE)
            if rule.blocks_door and any(c in doors.get(rid, ()) for c in item.cells()):
                errors.append(f"{item.type} blocks a door of {rid}.")

    return (len(errors) == 0, errors)
