# tileplan/assembly.py
from typing import Callable, Dict, List, Sequence

from tileplan.constants import DOOR_SPRITE, default_furnishing, floor_sprite
from tileplan.furniture import FurniturePlacement, FurnitureSolver
from tileplan.grid import CellGrid, CellState
from tileplan.model import PlacedRoom
from tileplan.schema import Tile, TileMap


def furnish_rooms(grid: CellGrid, rooms: Sequence[PlacedRoom], solver: FurnitureSolver, table, fallback,
                  furnish_empty: bool = True) -> Dict[str, List[FurniturePlacement]]:
    """Runs the solver per room; rooms that request nothing get the style's default furnishing."""
    furniture = {}
    for room in rooms:
        items = list(room.spec.furniture)
        if not items and furnish_empty:
            items = list(default_furnishing(room.type, table, fallback))
        furniture[room.id] = solver.solve(grid, room, items)
    return furniture


def assemble_tilemap(grid: CellGrid, rooms: Sequence[PlacedRoom], furniture: Dict[str, List[FurniturePlacement]],
                     wall_sprite: str, open_floor: Callable[[int, int], str],
                     extras: Sequence[Tile] = ()) -> TileMap:
    """Row-major floor, wall and door tiles, then furniture in placement order, then extras."""
    by_index = {r.index: r for r in rooms}
    sprites = {r.index: floor_sprite(r.type) for r in rooms}
    tiles: List[Tile] = []
    for y in range(grid.height):
        for x in range(grid.width):
            state = grid.cells[y, x]
            if state == CellState.FLOOR:
                owner = int(grid.owner[y, x])
                sprite = sprites[owner] if owner in by_index else open_floor(x, y)
                tiles.append(Tile(x=x, y=y, sprite=sprite, layer="floor"))
            elif state == CellState.WALL:
                tiles.append(Tile(x=x, y=y, sprite=wall_sprite, layer="wall"))
            elif state == CellState.DOOR:
                tiles.append(Tile(x=x, y=y, sprite=DOOR_SPRITE, layer="floor"))
    for room in rooms:
        for item in furniture.get(room.id, []):
            tiles.append(Tile(x=item.x, y=item.y, sprite=item.type, rotation=item.rotation, layer="furniture"))
    tiles.extend(extras)
    return TileMap(width=grid.width, height=grid.height, tiles=tiles,
                   rooms=[r.to_room_data() for r in rooms if r.listed])
