# tileplan/constants.py
import re
from types import MappingProxyType
from typing import NamedTuple, Optional, Sequence, Tuple

from tileplan.grid import Zone

WALL, CENTER = Zone.WALL_ADJACENT, Zone.INTERIOR

# === Room sizing (floor cells, walls excluded) ===
# first keyword contained in the room type wins, so longer keys go first
ROOM_SIZES: Tuple[Tuple[str, Tuple[int, int]], ...] = (
    ("corridor", (16, 3)),
    ("hallway", (14, 3)),
    ("passage", (12, 2)),
    ("hall", (14, 3)),
    ("living", (8, 7)),
    ("common", (8, 7)),
    ("lobby", (8, 7)),
    ("foyer", (6, 5)),
    ("entrance", (5, 4)),
    ("kitchen", (6, 5)),
    ("dining", (7, 5)),
    ("master", (7, 6)),
    ("bedroom", (6, 6)),
    ("quarters", (6, 6)),
    ("bathroom", (4, 4)),
    ("storage", (4, 3)),
    ("utility", (4, 4)),
    ("library", (7, 6)),
    ("throne", (8, 8)),
    ("main", (8, 7)),
    ("exterior", (8, 6)),
)
DEFAULT_ROOM_SIZE = (6, 6)

# BSP assigns the most important rooms to the largest leaves
ROOM_IMPORTANCE: Tuple[Tuple[str, int], ...] = (
    ("living", 10), ("common", 10), ("main", 9), ("lobby", 9), ("foyer", 8), ("entrance", 8),
    ("kitchen", 7), ("dining", 6), ("master", 6), ("throne", 6), ("library", 5), ("bedroom", 5),
    ("corridor", 5), ("hall", 5), ("bathroom", 3), ("utility", 2), ("storage", 1),
)
DEFAULT_IMPORTANCE = 4

SPINE_PATTERN = re.compile(r"corridor|hall|passage")
HUB_PATTERN = re.compile(r"living|common|lobby|foyer")


def _lookup(table, room_type: str, default):
    room_type = room_type.lower()
    for key, value in table:
        if key == room_type:
            return value
    for key, value in table:
        if key in room_type:
            return value
    return default


def default_room_size(room_type: str) -> Tuple[int, int]:
    return _lookup(ROOM_SIZES, room_type, DEFAULT_ROOM_SIZE)


def room_importance(room_type: str) -> int:
    return _lookup(ROOM_IMPORTANCE, room_type, DEFAULT_IMPORTANCE)


def is_hall(room_type: str) -> bool:
    return bool(SPINE_PATTERN.search(room_type.lower()))


# === Furniture rules ===
class FurnitureRule(NamedTuple):
    width: int
    height: int
    zones: Tuple[Zone, ...]
    blocks_door: bool = False
    faces: Optional[str] = None


FURNITURE_RULES = MappingProxyType({
    "bed": FurnitureRule(1, 2, (WALL,), blocks_door=True),
    "chest": FurnitureRule(1, 1, (WALL, CENTER)),
    "table": FurnitureRule(2, 2, (CENTER,)),
    "chair": FurnitureRule(1, 1, (CENTER,)),
    "rug": FurnitureRule(2, 2, (CENTER,)),
    "sofa": FurnitureRule(2, 1, (CENTER, WALL)),
    "tv": FurnitureRule(1, 1, (WALL,), faces="sofa"),
    "throne": FurnitureRule(2, 2, (WALL,), blocks_door=True),
    "bookshelf": FurnitureRule(2, 1, (WALL,)),
    "gold": FurnitureRule(1, 1, (CENTER,)),
    "fire": FurnitureRule(1, 1, (CENTER,)),
})
DEFAULT_FURNITURE_RULE = FurnitureRule(1, 1, (WALL, CENTER))

# === Default furnishings for rooms that request nothing ===
STRUCTURED_FURNISHINGS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("corridor", ()),
    ("hall", ()),
    ("passage", ()),
    ("bedroom", ("bed", "chest", "rug")),
    ("kitchen", ("table", "chair", "chair")),
    ("throne", ("throne", "rug", "chest", "chest")),
    ("library", ("bookshelf", "bookshelf", "table", "chair")),
)
ORGANIC_FURNISHINGS = (
    ("lair", ("chest", "chest", "gold")),
    ("camp", ("bed", "bed", "fire")),
)
GEOMETRIC_FURNISHINGS = (
    ("bridge", ("throne", "rug")),
    ("altar", ("throne", "rug")),
    ("quarters", ("bed", "chest")),
)
FALLBACK_FURNISHING = {
    "structured": ("chest",),
    "organic": ("chest",),
    "geometric": ("chair", "table"),
}


def default_furnishing(room_type: str, table: Sequence, fallback: Tuple[str, ...]) -> Tuple[str, ...]:
    return _lookup(table, room_type, fallback)


# === Sprite keys ===
HALL_FLOOR_SPRITE = "floor_stone"
DOOR_SPRITE = "door_wood"
STRUCTURED_WALL_SPRITE = "wall_brick"
ORGANIC_WALL_SPRITE = "wall_rock"
GEOMETRIC_WALL_SPRITE = "wall_stone"
CAVE_FLOOR_SPRITES = ("floor_grass", "floor_mud")
DECORATION_SPRITE = "mushroom"


def floor_sprite(room_type: str) -> str:
    if is_hall(room_type):
        return HALL_FLOOR_SPRITE
    return "floor_" + re.sub(r"\W+", "_", room_type.lower()).strip("_")
