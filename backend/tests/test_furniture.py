"""Tests for the furniture constraint solver."""

from __future__ import annotations

import random
from types import MappingProxyType

import pytest

from tileplan.constants import FURNITURE_RULES, FurnitureRule
from tileplan.furniture import FurnitureSolver, doorway_cells, faces_toward, footprint
from tileplan.geometry import Rect
from tileplan.grid import CellGrid, CellState, Zone
from tileplan.model import PlacedRoom
from tileplan.raster import rasterize, skin_walls
from tileplan.schema import RoomSpec


def _walled_room(floor_w: int, floor_h: int, door=None):
    room = PlacedRoom(0, RoomSpec(id="room", type="bedroom"), Rect(0, 0, floor_w + 2, floor_h + 2))
    grid = CellGrid(floor_w + 2, floor_h + 2)
    rasterize(grid, [room])
    skin_walls(grid)
    if door is not None:
        grid.promote(door[0], door[1], CellState.DOOR)
        room.add_door(door)
    return grid, room


def _assert_valid(grid, room, placed) -> None:
    own = grid.room_mask(room.index)
    seen = set()
    for p in placed:
        for x, y in p.cells():
            assert own[y, x], f"{p.type} leaves the room floor at {(x, y)}"
            assert (x, y) not in seen, f"{p.type} overlaps another item"
            seen.add((x, y))


class TestOrdering:
    def test_larger_footprints_first_stable_on_request(self) -> None:
        solver = FurnitureSolver()
        assert solver.order_items(["chair", "table", "chest", "rug"]) == ["table", "rug", "chair", "chest"]

    def test_dependent_waits_for_target(self) -> None:
        solver = FurnitureSolver()
        assert solver.order_items(["tv", "sofa"]) == ["sofa", "tv"]
        assert solver.order_items(["tv", "chest", "sofa", "rug"]) == ["rug", "sofa", "tv", "chest"]

    def test_target_not_requested_means_no_wait(self) -> None:
        assert FurnitureSolver().order_items(["tv", "chest"]) == ["tv", "chest"]

    def test_facing_cycle_keeps_every_item(self) -> None:
        rules = MappingProxyType({
            "a": FurnitureRule(1, 1, (Zone.INTERIOR,), faces="b"),
            "b": FurnitureRule(1, 1, (Zone.INTERIOR,), faces="a"),
        })
        assert sorted(FurnitureSolver(rules).order_items(["a", "b"])) == ["a", "b"]


class TestGeometry:
    def test_rotation_swaps_footprint(self) -> None:
        bed = FURNITURE_RULES["bed"]
        assert footprint(bed, 0) == (1, 2)
        assert footprint(bed, 90) == (2, 1)
        assert footprint(bed, 180) == (1, 2)
        assert footprint(bed, 270) == (2, 1)

    @pytest.mark.parametrize("rotation, expected", [(0, False), (90, False), (180, True), (270, False)])
    def test_facing_cone(self, rotation, expected) -> None:
        assert faces_toward(Rect(3, 0, 1, 1), rotation, Rect(3, 5, 1, 1)) is expected

    def test_diagonal_is_inside_cone(self) -> None:
        assert faces_toward(Rect(0, 0, 1, 1), 90, Rect(4, 4, 1, 1))
        assert faces_toward(Rect(0, 0, 1, 1), 180, Rect(4, 4, 1, 1))

    def test_same_centre_counts_as_facing(self) -> None:
        assert faces_toward(Rect(2, 2, 1, 1), 0, Rect(2, 2, 1, 1))

    def test_doorway_includes_threshold(self) -> None:
        grid, room = _walled_room(5, 5, door=(3, 6))
        assert doorway_cells(grid, room) == {(3, 6), (3, 5)}


class TestSolver:
    def test_bed_never_blocks_the_door(self) -> None:
        for seed in range(25):
            grid, room = _walled_room(5, 5, door=(3, 6))
            placed = FurnitureSolver(rng=random.Random(seed)).solve(grid, room, ["bed", "chest"])
            types = [p.type for p in placed]
            assert types == ["bed", "chest"]
            bed = placed[0]
            assert (3, 6) not in bed.cells() and (3, 5) not in bed.cells()
            _assert_valid(grid, room, placed)

    def test_bed_prefers_the_walls(self) -> None:
        grid, room = _walled_room(5, 5)
        bed = FurnitureSolver(rng=random.Random(2)).solve(grid, room, ["bed"])[0]
        # the anchor cell sits in the ring of floor next to the walls
        assert bed.x in (1, 5) or bed.y in (1, 5)

    def test_tv_faces_the_sofa(self) -> None:
        for seed in range(25):
            grid, room = _walled_room(6, 6)
            placed = FurnitureSolver(rng=random.Random(seed)).solve(grid, room, ["tv", "sofa"])
            assert [p.type for p in placed] == ["sofa", "tv"]
            sofa, tv = placed
            assert faces_toward(tv.rect, tv.rotation, sofa.rect)
            _assert_valid(grid, room, placed)

    def test_unplaceable_items_are_dropped(self) -> None:
        grid, room = _walled_room(1, 1)
        assert FurnitureSolver(rng=random.Random(0)).solve(grid, room, ["table", "rug"]) == []

    def test_full_room_drops_extras(self) -> None:
        grid, room = _walled_room(2, 2)
        placed = FurnitureSolver(rng=random.Random(0)).solve(grid, room, ["table", "chest"])
        assert [p.type for p in placed] == ["table"]

    def test_unknown_type_uses_single_cell_default(self) -> None:
        grid, room = _walled_room(4, 4)
        placed = FurnitureSolver(rng=random.Random(0)).solve(grid, room, ["lamp"])
        assert len(placed) == 1 and (placed[0].width, placed[0].height) == (1, 1)

    def test_injected_rules_are_used(self) -> None:
        rules = MappingProxyType({"altar": FurnitureRule(3, 1, (Zone.INTERIOR,))})
        grid, room = _walled_room(5, 5)
        placed = FurnitureSolver(rules, random.Random(0)).solve(grid, room, ["altar"])
        assert {(p.width, p.height) for p in placed} <= {(3, 1), (1, 3)}
        assert len(placed) == 1

    def test_crowded_room_stays_consistent(self) -> None:
        items = ["bookshelf", "bookshelf", "table", "chair", "chair", "rug", "chest", "bed", "throne"]
        for seed in range(10):
            grid, room = _walled_room(7, 6, door=(0, 3))
            placed = FurnitureSolver(rng=random.Random(seed)).solve(grid, room, items)
            _assert_valid(grid, room, placed)
            blocked = doorway_cells(grid, room)
            for p in placed:
                if FURNITURE_RULES[p.type].blocks_door:
                    assert not set(p.cells()) & blocked
