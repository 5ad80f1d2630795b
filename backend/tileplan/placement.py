# tileplan/placement.py
import random
from typing import Iterable, List, Optional, Tuple

from tileplan.geometry import Rect, shared_wall

SEAM = 1  # adjacent rooms may share one wall line


def perimeter_candidates(parent: Rect, w: int, h: int) -> List[Rect]:
    """Every position where a w x h child shares one of the parent's wall lines."""
    out = []
    for x in range(parent.x - w + 1, parent.right):
        out.append(Rect(x, parent.y - h + 1, w, h))
        out.append(Rect(x, parent.bottom - 1, w, h))
    for y in range(parent.y - h + 1, parent.bottom):
        out.append(Rect(parent.x - w + 1, y, w, h))
        out.append(Rect(parent.right - 1, y, w, h))
    return out


def fits(candidate: Rect, placed: Iterable[Rect], width: int, height: int) -> bool:
    if not candidate.within(width, height):
        return False
    return not any(candidate.overlaps(r, inset=SEAM) for r in placed)


def can_attach(parent: Rect, candidate: Rect, placed: Iterable[Rect], width: int, height: int,
               door_width: int = 2) -> bool:
    contact = shared_wall(parent, candidate)
    if contact is None or contact.hi - contact.lo < door_width:
        return False
    return fits(candidate, placed, width, height)


def snap(parent: Rect, size: Tuple[int, int], placed: Iterable[Rect], width: int, height: int,
         rng: random.Random, door_width: int = 2) -> Optional[Rect]:
    """First-fit search over the parent's shuffled perimeter. Returns None when every candidate collides."""
    w, h = size
    placed = list(placed)
    candidates = perimeter_candidates(parent, w, h)
    rng.shuffle(candidates)
    for c in candidates:
        if can_attach(parent, c, placed, width, height, door_width):
            return c
    return None
