# tileplan/organic.py
import logging
import random
from typing import Any, Dict, List, Optional

import numpy as np
from scipy import ndimage

from tileplan.assembly import assemble_tilemap, furnish_rooms
from tileplan.connectivity import repair_connectivity
from tileplan.constants import (CAVE_FLOOR_SPRITES, DECORATION_SPRITE, FALLBACK_FURNISHING, ORGANIC_FURNISHINGS,
                                ORGANIC_WALL_SPRITE)
from tileplan.furniture import FurniturePlacement, FurnitureSolver
from tileplan.geometry import Rect
from tileplan.grid import NO_OWNER, CellGrid, CellState
from tileplan.model import PlacedRoom
from tileplan.raster import skin_walls
from tileplan.schema import RoomGraph, Tile, TileMap, parse_room_graph
from tileplan.settings import GenerationSettings

logger = logging.getLogger(__name__)

ROOM_SIZE = 8
ROOM_PADDING = 4
PLACEMENT_TRIES = 50
NOISE_CELL = 8
NEIGHBOURS = np.array([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=np.int8)


def grow_cave(width: int, height: int, np_rng: np.random.Generator, fill: float = 0.45, steps: int = 4) -> np.ndarray:
    """Boolean floor mask from majority-rule smoothing of random rock. Off-grid counts as rock."""
    rock = np_rng.random((height, width)) < fill
    for _ in range(steps):
        n = ndimage.convolve(rock.astype(np.int8), NEIGHBOURS, mode="constant", cval=1)
        rock = np.where(rock, n >= 4, n > 4)
    floor = ~rock
    floor[0, :] = floor[-1, :] = False
    floor[:, 0] = floor[:, -1] = False
    return floor


def value_noise(width: int, height: int, np_rng: np.random.Generator, cell: int = NOISE_CELL) -> np.ndarray:
    """Smooth noise in [0, 1), darkened towards the edges."""
    coarse = np_rng.random((height // cell + 2, width // cell + 2))
    fine = ndimage.zoom(coarse, cell, order=1)[:height, :width]
    ys, xs = np.mgrid[0:height, 0:width]
    dist = np.hypot(xs / width - 0.5, ys / height - 0.5)
    return fine * (1.0 - 0.5 * dist)


class OrganicGenerator:
    """Cellular-automaton cave with the declared rooms carved in as open blocks."""
    style = "organic"
    strategy = "cave"

    def __init__(self, settings: Optional[GenerationSettings] = None, rng: Optional[random.Random] = None):
        self.settings = settings or GenerationSettings()
        self.rng = rng or random.Random()
        self.placed: List[PlacedRoom] = []
        self.furniture: Dict[str, List[FurniturePlacement]] = {}
        self.anchor_id: Optional[str] = None
        self.grid: Optional[CellGrid] = None

    def carve_rooms(self, graph: RoomGraph) -> List[PlacedRoom]:
        W, H = graph.width, graph.height
        placed: List[PlacedRoom] = []
        for spec in graph.rooms:
            w = min(spec.width or ROOM_SIZE, W - 2 * ROOM_PADDING - 2)
            h = min(spec.height or ROOM_SIZE, H - 2 * ROOM_PADDING - 2)
            for _ in range(PLACEMENT_TRIES):
                x = self.rng.randint(ROOM_PADDING, W - w - ROOM_PADDING - 1)
                y = self.rng.randint(ROOM_PADDING, H - h - ROOM_PADDING - 1)
                rect = Rect(x, y, w, h)
                # keep one cell of cave between blocks
                if not any(Rect(x - 1, y - 1, w + 2, h + 2).overlaps(p.rect) for p in placed):
                    placed.append(PlacedRoom(len(placed), spec, rect, floor=rect))
                    break
            else:
                logger.warning("Dropping room '%s': no free %dx%d block in the cave", spec.id, w, h)
        return placed

    def generate(self, graph: Any) -> TileMap:
        graph = parse_room_graph(graph)
        s = self.settings
        W, H = graph.width, graph.height
        np_rng = np.random.default_rng(self.rng.getrandbits(32))

        grid = CellGrid(W, H)
        grid.paint_floor(grow_cave(W, H, np_rng, s.cave_fill, s.smoothing_steps))
        self.placed = self.carve_rooms(graph)
        for room in self.placed:
            mask = np.zeros((H, W), dtype=bool)
            f = room.floor
            mask[f.y:f.bottom, f.x:f.right] = True
            grid.paint_floor(mask, room.index)
        root = self.placed[0]
        self.anchor_id = root.id

        skin_walls(grid)
        repair_connectivity(grid, self.placed, root, self.rng, s.corridor_width)
        skin_walls(grid)
        self.grid = grid

        solver = FurnitureSolver(s.furniture_rules, self.rng, s.default_rule)
        self.furniture = furnish_rooms(grid, self.placed, solver, ORGANIC_FURNISHINGS,
                                       FALLBACK_FURNISHING[self.style], s.furnish_empty_rooms)

        noise = value_noise(W, H, np_rng)
        open_floor = (grid.cells == CellState.FLOOR) & (grid.owner == NO_OWNER)
        scatter = open_floor & (np_rng.random((H, W)) < s.decoration_chance)
        decorations = [Tile(x=int(x), y=int(y), sprite=DECORATION_SPRITE, layer="furniture")
                       for y, x in np.argwhere(scatter)]

        def biome(x, y):
            return CAVE_FLOOR_SPRITES[0] if noise[y, x] > 0.5 else CAVE_FLOOR_SPRITES[1]

        tilemap = assemble_tilemap(grid, self.placed, self.furniture, ORGANIC_WALL_SPRITE, biome, decorations)
        logger.info("Organic layout: rooms=%d/%d cave_floor=%d decorations=%d",
                    len(self.placed), len(graph.rooms), int(open_floor.sum()), len(decorations))
        return tilemap
