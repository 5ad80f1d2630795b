# tileplan/bsp.py
import logging
import math
import random
from typing import List, Optional, Tuple

from tileplan.constants import room_importance
from tileplan.geometry import Rect
from tileplan.strategies import LayoutBuilder

logger = logging.getLogger(__name__)

LOT_SLACK = 1.3  # lot area relative to the rooms' requested area


def _split_axis(leaf: Rect, min_dim: int) -> Optional[bool]:
    """True to cut with a vertical wall, False for horizontal, None if the leaf cannot split."""
    options = []
    if leaf.w >= 2 * min_dim - 1:
        half = (leaf.w + 1) / 2
        options.append((max(half, leaf.h) / min(half, leaf.h), True))
    if leaf.h >= 2 * min_dim - 1:
        half = (leaf.h + 1) / 2
        options.append((max(half, leaf.w) / min(half, leaf.w), False))
    if not options:
        return None
    return min(options, key=lambda o: o[0])[1]


def split_leaf(leaf: Rect, rng: random.Random, min_dim: int) -> Optional[Tuple[Rect, Rect]]:
    vertical = _split_axis(leaf, min_dim)
    if vertical is None:
        return None
    length = leaf.w if vertical else leaf.h
    # the wall line at offset `cut` belongs to both children
    cut = rng.randint(min_dim - 1, length - min_dim)
    if vertical:
        return Rect(leaf.x, leaf.y, cut + 1, leaf.h), Rect(leaf.x + cut, leaf.y, leaf.w - cut, leaf.h)
    return Rect(leaf.x, leaf.y, leaf.w, cut + 1), Rect(leaf.x, leaf.y + cut, leaf.w, leaf.h - cut)


def partition(lot: Rect, count: int, rng: random.Random, min_dim: int = 5) -> List[Rect]:
    """Splits the largest splittable leaf until there are `count` leaves or nothing can split."""
    leaves = [lot]
    while len(leaves) < count:
        splittable = [i for i, leaf in enumerate(leaves) if _split_axis(leaf, min_dim) is not None]
        if not splittable:
            break
        i = max(splittable, key=lambda k: leaves[k].area)
        a, b = split_leaf(leaves[i], rng, min_dim)
        leaves[i:i + 1] = [a, b]
    return leaves


def lot_for(builder: LayoutBuilder) -> Rect:
    """Centred lot with the canvas aspect ratio, big enough for the requested rooms."""
    wanted = sum(w * h for w, h in builder.sizes.values()) * LOT_SLACK
    ratio = builder.width / builder.height
    w = min(builder.width, max(3, math.ceil(math.sqrt(wanted * ratio))))
    h = min(builder.height, max(3, math.ceil(wanted / w)))
    return Rect((builder.width - w) // 2, (builder.height - h) // 2, w, h)


def layout_bsp(builder: LayoutBuilder, min_dim: int = 5) -> str:
    """Assigns rooms by descending importance to leaves by descending area. Returns the anchor id."""
    ranked = sorted(builder.order, key=lambda rid: (-room_importance(builder.specs[rid].type), builder.order.index(rid)))
    leaves = partition(lot_for(builder), len(ranked), builder.rng, min_dim)
    leaves = sorted(leaves, key=lambda r: -r.area)
    for rid, leaf in zip(ranked, leaves):
        builder.place(rid, leaf)
    for rid in ranked[len(leaves):]:
        logger.warning("Dropping room '%s': lot split into only %d leaves", rid, len(leaves))
    return ranked[0]
