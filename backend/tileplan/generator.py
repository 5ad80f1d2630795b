# tileplan/generator.py
import logging
import random
from typing import Any, Dict, List, Optional, Tuple

from tileplan.assembly import assemble_tilemap, furnish_rooms
from tileplan.bsp import layout_bsp
from tileplan.connectivity import repair_connectivity
from tileplan.constants import FALLBACK_FURNISHING, HALL_FLOOR_SPRITE, STRUCTURED_FURNISHINGS, STRUCTURED_WALL_SPRITE
from tileplan.furniture import FurniturePlacement, FurnitureSolver
from tileplan.geometric import GeometricGenerator
from tileplan.grid import CellGrid
from tileplan.model import PlacedRoom
from tileplan.organic import OrganicGenerator
from tileplan.raster import carve_doors, rasterize, skin_walls
from tileplan.schema import RoomGraph, TileMap, parse_room_graph
from tileplan.settings import GenerationSettings
from tileplan.strategies import BSP, LAYOUTS, LayoutBuilder, connection_graph, select_strategy

logger = logging.getLogger(__name__)


def declared_connections(graph: RoomGraph) -> List[Tuple[str, str]]:
    return [tuple(edge) for edge in connection_graph(graph.rooms).edges()]


class StructuredGenerator:
    """Walled rooms laid out by Spine/Hub/Cluster growth or BSP, joined by doors."""
    style = "structured"

    def __init__(self, settings: Optional[GenerationSettings] = None, rng: Optional[random.Random] = None,
                 hint: Optional[str] = None):
        self.settings = settings or GenerationSettings()
        self.rng = rng or random.Random()
        self.hint = hint
        self.placed: List[PlacedRoom] = []
        self.furniture: Dict[str, List[FurniturePlacement]] = {}
        self.strategy: Optional[str] = None
        self.anchor_id: Optional[str] = None
        self.grid: Optional[CellGrid] = None

    def layout(self, graph: RoomGraph) -> List[PlacedRoom]:
        G = connection_graph(graph.rooms)
        self.strategy, self.anchor_id = select_strategy(graph.rooms, self.hint, G)
        builder = LayoutBuilder(graph.rooms, graph.width, graph.height, self.rng, self.settings.door_width, G)
        if self.strategy == BSP:
            self.anchor_id = layout_bsp(builder, self.settings.min_room_dim)
        else:
            LAYOUTS[self.strategy](builder, self.anchor_id)
        return builder.result()

    def generate(self, graph: Any) -> TileMap:
        graph = parse_room_graph(graph)
        s = self.settings
        self.placed = self.layout(graph)
        root = next(r for r in self.placed if r.id == self.anchor_id)

        grid = CellGrid(graph.width, graph.height)
        rasterize(grid, self.placed)
        skin_walls(grid)
        carve_doors(grid, self.placed, declared_connections(graph), s.door_width)
        repair_connectivity(grid, self.placed, root, self.rng, s.corridor_width)
        # wall in any dug passages
        skin_walls(grid)
        self.grid = grid

        solver = FurnitureSolver(s.furniture_rules, self.rng, s.default_rule)
        self.furniture = furnish_rooms(grid, self.placed, solver, STRUCTURED_FURNISHINGS,
                                       FALLBACK_FURNISHING[self.style], s.furnish_empty_rooms)
        tilemap = assemble_tilemap(grid, self.placed, self.furniture, STRUCTURED_WALL_SPRITE,
                                   lambda x, y: HALL_FLOOR_SPRITE)
        logger.info("Structured layout: strategy=%s anchor=%s rooms=%d/%d furniture=%d",
                    self.strategy, self.anchor_id, len(self.placed), len(graph.rooms),
                    sum(len(v) for v in self.furniture.values()))
        return tilemap


# === Factory ===
GENERATORS = {
    "structured": StructuredGenerator,
    "organic": OrganicGenerator,
    "geometric": GeometricGenerator,
}


def get_generator(style: Optional[str] = None, settings: Optional[GenerationSettings] = None,
                  seed: Optional[int] = None, hint: Optional[str] = None):
    key = (style or "structured").strip().lower()
    if key not in GENERATORS:
        logger.warning("Unknown style '%s', using structured", style)
        key = "structured"
    rng = random.Random(seed)
    if key == "structured":
        return StructuredGenerator(settings, rng, hint)
    return GENERATORS[key](settings, rng)


def generate(graph: Any, seed: Optional[int] = None, style: Optional[str] = None,
             settings: Optional[GenerationSettings] = None, hint: Optional[str] = None) -> TileMap:
    """Validates the graph and runs the generator named by `style`, or by the graph's own style tag."""
    graph = parse_room_graph(graph)
    return get_generator(style or graph.type, settings, seed, hint).generate(graph)
