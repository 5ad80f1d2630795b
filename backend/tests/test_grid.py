"""Tests for the cell grid, promotion rules and zone classification."""

from __future__ import annotations

import numpy as np
import pytest

from tileplan.grid import NO_OWNER, CellGrid, CellState, Zone, classify_zones


def _room_grid() -> CellGrid:
    grid = CellGrid(7, 7)
    mask = np.zeros((7, 7), dtype=bool)
    mask[1:6, 1:6] = True
    grid.paint_floor(mask, owner=0)
    return grid


class TestPromotion:
    def test_forward_promotions(self) -> None:
        grid = CellGrid(4, 4)
        assert grid.promote(0, 0, CellState.FLOOR)
        assert grid.promote(1, 0, CellState.WALL)
        assert grid.promote(1, 0, CellState.DOOR)
        assert not grid.promote(1, 0, CellState.DOOR)
        assert grid.state(1, 0) == CellState.DOOR

    @pytest.mark.parametrize("start, target", [
        (CellState.FLOOR, CellState.WALL),
        (CellState.FLOOR, CellState.BACKGROUND),
        (CellState.WALL, CellState.FLOOR),
        (CellState.DOOR, CellState.WALL),
    ])
    def test_demotion_is_rejected(self, start, target) -> None:
        grid = CellGrid(3, 3)
        grid.cells[1, 1] = start
        with pytest.raises(ValueError):
            grid.promote(1, 1, target)

    def test_bulk_promotion_skips_illegal_cells(self) -> None:
        grid = _room_grid()
        changed = grid.promote_where(np.ones((7, 7), dtype=bool), CellState.WALL)
        assert changed == 49 - 25
        assert grid.count(CellState.FLOOR) == 25

    def test_paint_floor_records_owner(self) -> None:
        grid = _room_grid()
        assert grid.owner[3, 3] == 0
        assert grid.owner[0, 0] == NO_OWNER
        assert len(grid.room_cells(0)) == 25


class TestZones:
    def test_ring_is_wall_adjacent(self) -> None:
        zones = classify_zones(_room_grid(), 0)
        assert len(zones[Zone.WALL_ADJACENT]) == 16
        assert len(zones[Zone.INTERIOR]) == 9
        assert (1, 1) in zones[Zone.WALL_ADJACENT]
        assert (3, 3) in zones[Zone.INTERIOR]

    def test_other_rooms_floor_counts_as_boundary(self) -> None:
        grid = _room_grid()
        grid.owner[3, 5] = 1
        zones = classify_zones(grid, 0)
        assert (4, 3) in zones[Zone.WALL_ADJACENT]

    def test_cells_are_row_major(self) -> None:
        zones = classify_zones(_room_grid(), 0)
        edge = zones[Zone.WALL_ADJACENT]
        assert edge == sorted(edge, key=lambda c: (c[1], c[0]))
