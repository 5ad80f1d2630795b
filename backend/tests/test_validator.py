"""Tests for the post-generation tile map checks."""

from __future__ import annotations

from app.services.validator import unreachable_rooms, validate_tilemap, walkable_mask
from tileplan.furniture import FurniturePlacement
from tileplan.schema import DoorCell, RoomData, Tile, TileMap


def _room_tiles(x, y, w, h):
    return [Tile(x=cx, y=cy, sprite="floor_wood", layer="floor")
            for cy in range(y, y + h) for cx in range(x, x + w)]


def _two_rooms(b_x: int = 6, door: bool = True) -> TileMap:
    tiles = _room_tiles(1, 1, 4, 4) + _room_tiles(b_x, 1, 4, 4)
    doors = []
    if door:
        doors = [DoorCell(x=5, y=2), DoorCell(x=5, y=3)]
        tiles += [Tile(x=d.x, y=d.y, sprite="door_wood", layer="floor") for d in doors]
    rooms = [
        RoomData(id="a", name="A", type="bedroom", x=1, y=1, width=4, height=4, doors=doors),
        RoomData(id="b", name="B", type="kitchen", x=b_x, y=1, width=4, height=4, doors=doors),
    ]
    return TileMap(width=12, height=8, tiles=tiles, rooms=rooms)


class TestValidateTileMap:
    def test_clean_map(self) -> None:
        ok, errors = validate_tilemap(_two_rooms(), room_ids=["a", "b"])
        assert ok, errors
        assert errors == []

    def test_walkable_mask_counts_floor_layer(self) -> None:
        mask = walkable_mask(_two_rooms())
        assert mask.sum() == 16 + 16 + 2
        assert mask[2, 5] and not mask[0, 0]

    def test_unreachable_room(self) -> None:
        tilemap = _two_rooms(door=False)
        assert unreachable_rooms(tilemap) == ["b"]
        ok, errors = validate_tilemap(tilemap)
        assert not ok
        assert "b is not reachable from a." in errors

    def test_reachability_from_given_root(self) -> None:
        assert unreachable_rooms(_two_rooms(door=False), root_id="b") == ["a"]

    def test_overlapping_rooms(self) -> None:
        ok, errors = validate_tilemap(_two_rooms(b_x=3))
        assert not ok
        assert "a overlaps with b." in errors

    def test_unknown_room_id(self) -> None:
        ok, errors = validate_tilemap(_two_rooms(), room_ids=["a"])
        assert not ok
        assert "b is not a requested room." in errors

    def test_tile_off_canvas(self) -> None:
        tilemap = _two_rooms()
        tilemap.tiles.append(Tile(x=12, y=0, sprite="wall_brick", layer="wall"))
        ok, errors = validate_tilemap(tilemap)
        assert not ok
        assert any("off the canvas" in e for e in errors)

    def test_furniture_overlap(self) -> None:
        furniture = {"a": [
            FurniturePlacement("table", 1, 1, 2, 2, 0),
            FurniturePlacement("chair", 2, 2, 1, 1, 0),
        ]}
        ok, errors = validate_tilemap(_two_rooms(), furniture)
        assert not ok
        assert "table overlaps with chair in a." in errors

    def test_blocking_furniture_on_door(self) -> None:
        furniture = {"a": [FurniturePlacement("bed", 5, 2, 1, 2, 0)]}
        ok, errors = validate_tilemap(_two_rooms(), furniture)
        assert not ok
        assert "bed blocks a door of a." in errors

    def test_non_blocking_furniture_may_sit_anywhere(self) -> None:
        furniture = {"a": [FurniturePlacement("chest", 5, 2, 1, 1, 0)]}
        ok, errors = validate_tilemap(_two_rooms(), furniture)
        assert ok, errors
