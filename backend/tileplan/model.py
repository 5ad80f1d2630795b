# tileplan/model.py
from typing import List, Optional, Tuple

from tileplan.geometry import Rect
from tileplan.schema import DoorCell, RoomData, RoomSpec


class PlacedRoom:
    """A RoomSpec bound to a position. After layout only door cells are ever added."""

    def __init__(self, index: int, spec: RoomSpec, rect: Rect, floor: Optional[Rect] = None,
                 room_id: Optional[str] = None, listed: bool = True):
        self.index, self.spec, self.rect = index, spec, rect
        # walled rooms: outer rect includes the wall ring
        self.floor = floor if floor is not None else rect.inset(1)
        self.id = room_id or spec.id
        self.listed = listed
        self.doors: List[Tuple[int, int]] = []

    @property
    def type(self) -> str:
        return self.spec.type

    @property
    def name(self) -> str:
        return self.spec.name

    def add_door(self, cell: Tuple[int, int]):
        if cell not in self.doors:
            self.doors.append(cell)

    def to_room_data(self) -> RoomData:
        f = self.floor
        return RoomData(id=self.id, name=self.name, type=self.type, x=f.x, y=f.y, width=f.w, height=f.h,
                        doors=[DoorCell(x=x, y=y) for x, y in self.doors])

    def __repr__(self):
        return f"PlacedRoom({self.id!r}, {tuple(self.rect)})"
