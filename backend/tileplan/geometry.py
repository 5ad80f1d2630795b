# tileplan/geometry.py
from collections import namedtuple
from typing import Iterator, List, Optional, Tuple

from shapely.geometry import box


class Rect(namedtuple("Rect", "x y w h")):
    """Integer cell rectangle; right and bottom are exclusive."""
    __slots__ = ()

    @property
    def right(self) -> int:
        return self.x + self.w

    @property
    def bottom(self) -> int:
        return self.y + self.h

    @property
    def area(self) -> int:
        return self.w * self.h

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.w / 2, self.y + self.h / 2)

    def center_cell(self) -> Tuple[int, int]:
        return (self.x + self.w // 2, self.y + self.h // 2)

    def inset(self, n: int = 1) -> "Rect":
        return Rect(self.x + n, self.y + n, max(self.w - 2 * n, 0), max(self.h - 2 * n, 0))

    def overlap_x(self, other: "Rect") -> int:
        return min(self.right, other.right) - max(self.x, other.x)

    def overlap_y(self, other: "Rect") -> int:
        return min(self.bottom, other.bottom) - max(self.y, other.y)

    def overlaps(self, other: "Rect", inset: int = 0) -> bool:
        """True when the two rectangles share more than `inset` cells along both axes."""
        return self.overlap_x(other) > inset and self.overlap_y(other) > inset

    def within(self, width: int, height: int) -> bool:
        return self.x >= 0 and self.y >= 0 and self.right <= width and self.bottom <= height

    def cells(self) -> Iterator[Tuple[int, int]]:
        for y in range(self.y, self.bottom):
            for x in range(self.x, self.right):
                yield (x, y)

    def aspect_ratio(self) -> float:
        lo = min(self.w, self.h)
        return max(self.w, self.h) / lo if lo else float("inf")

    def to_polygon(self):
        return box(self.x, self.y, self.right, self.bottom)


# vertical=True: the rooms sit side by side and the shared wall runs along y
WallContact = namedtuple("WallContact", "vertical lines lo hi")


def shared_wall(a: Rect, b: Rect) -> Optional[WallContact]:
    """Wall line(s) separating two outer rectangles, plus the span [lo, hi) where both interiors face each other.

    A one-cell overlap is a shared seam (one wall line); exact abutment leaves two wall lines.
    """
    ox, oy = a.overlap_x(b), a.overlap_y(b)
    if ox in (0, 1) and oy > 2:
        first, second = (a, b) if a.x <= b.x else (b, a)
        lines = [second.x] if ox == 1 else [first.right - 1, second.x]
        lo, hi = max(a.y, b.y) + 1, min(a.bottom, b.bottom) - 1
        return WallContact(True, lines, lo, hi)
    if oy in (0, 1) and ox > 2:
        first, second = (a, b) if a.y <= b.y else (b, a)
        lines = [second.y] if oy == 1 else [first.bottom - 1, second.y]
        lo, hi = max(a.x, b.x) + 1, min(a.right, b.right) - 1
        return WallContact(False, lines, lo, hi)
    return None


def door_cells(contact: WallContact, door_width: int) -> List[Tuple[int, int]]:
    """Door-width gap centred on the shared span; empty if the span is too short."""
    span = contact.hi - contact.lo
    if span < door_width:
        return []
    start = contact.lo + (span - door_width) // 2
    cells = []
    for line in contact.lines:
        for t in range(start, start + door_width):
            cells.append((line, t) if contact.vertical else (t, line))
    return cells


def manhattan(a: Tuple[int, int], b: Tuple[int, int]) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])
