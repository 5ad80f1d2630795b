"""Tests for rasterizing, wall skinning and door carving."""

from __future__ import annotations

from tileplan.geometry import Rect
from tileplan.grid import CellGrid, CellState
from tileplan.model import PlacedRoom
from tileplan.raster import carve_doors, rasterize, skin_walls
from tileplan.schema import RoomSpec


def _room(index: int, room_id: str, rect: Rect) -> PlacedRoom:
    return PlacedRoom(index, RoomSpec(id=room_id, type="bedroom"), rect)


class TestRasterize:
    def test_floor_is_the_inset_rectangle(self) -> None:
        grid = CellGrid(10, 10)
        rasterize(grid, [_room(0, "a", Rect(2, 2, 6, 6))])
        assert grid.count(CellState.FLOOR) == 16
        assert grid.owner[3, 3] == 0 and grid.owner[2, 2] == -1

    def test_skin_wraps_floor_in_walls(self) -> None:
        grid = CellGrid(10, 10)
        rasterize(grid, [_room(0, "a", Rect(2, 2, 6, 6))])
        assert skin_walls(grid) == 20
        assert grid.state(2, 2) == CellState.WALL
        assert grid.state(0, 0) == CellState.BACKGROUND
        # a second pass finds nothing new
        assert skin_walls(grid) == 0


class TestCarveDoors:
    def test_seam_door_is_centred_and_shared(self) -> None:
        a, b = _room(0, "a", Rect(0, 0, 6, 6)), _room(1, "b", Rect(5, 0, 6, 6))
        grid = CellGrid(11, 6)
        rasterize(grid, [a, b])
        skin_walls(grid)
        missing = carve_doors(grid, [a, b], [("a", "b")], door_width=2)
        assert missing == []
        assert a.doors == b.doors == [(5, 2), (5, 3)]
        assert grid.state(5, 2) == CellState.DOOR and grid.state(5, 3) == CellState.DOOR
        assert grid.state(5, 1) == CellState.WALL

    def test_abutting_rooms_open_both_walls(self) -> None:
        a, b = _room(0, "a", Rect(0, 0, 6, 6)), _room(1, "b", Rect(6, 0, 6, 6))
        grid = CellGrid(12, 6)
        rasterize(grid, [a, b])
        skin_walls(grid)
        carve_doors(grid, [a, b], [("a", "b")])
        assert {(5, 2), (6, 2), (5, 3), (6, 3)} == set(a.doors)
        assert grid.count(CellState.DOOR) == 4

    def test_wider_door(self) -> None:
        a, b = _room(0, "a", Rect(0, 0, 8, 8)), _room(1, "b", Rect(0, 7, 8, 8))
        grid = CellGrid(8, 15)
        rasterize(grid, [a, b])
        skin_walls(grid)
        carve_doors(grid, [a, b], [("a", "b")], door_width=3)
        assert a.doors == [(2, 7), (3, 7), (4, 7)]

    def test_rooms_apart_are_left_for_repair(self) -> None:
        a, b = _room(0, "a", Rect(0, 0, 6, 6)), _room(1, "b", Rect(10, 0, 6, 6))
        grid = CellGrid(16, 6)
        rasterize(grid, [a, b])
        skin_walls(grid)
        assert carve_doors(grid, [a, b], [("a", "b")]) == [("a", "b")]
        assert a.doors == [] and grid.count(CellState.DOOR) == 0
