# Matplotlib → PNG debug preview of a TileMap
import base64
import io
from typing import Dict, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from tileplan.schema import TileMap

# Minimal color palette for debug previews
DEFAULT_COLORS = {
    "background": "#ffffff",
    "wall": "#3b3b3b",
    "door": "#a0522d",
    "hall": "#d9d9d9",
    "grass": "#b9e6a4",
    "mud": "#c8b38a",
    "kitchen": "#f4bfbf",
    "bedroom": "#d0bdf4",
    "living": "#f9dcc4",
    "bathroom": "#b8c0ff",
    "other": "#f1e3c6",
}
FURNITURE_COLOR = "#1f4e79"


def _color_for(sprite: str) -> str:
    if sprite.startswith("wall_"):
        return DEFAULT_COLORS["wall"]
    if sprite.startswith("door_"):
        return DEFAULT_COLORS["door"]
    if sprite == "floor_stone":
        return DEFAULT_COLORS["hall"]
    t = sprite.lower()
    for key, color in DEFAULT_COLORS.items():
        if key in t:
            return color
    return DEFAULT_COLORS["other"]


def _rgb(hex_color: str):
    h = hex_color.lstrip("#")
    return tuple(int(h[i:i + 2], 16) / 255 for i in (0, 2, 4))


def render_preview(tilemap: TileMap, title: Optional[str] = "Tile Map") -> bytes:
    """PNG bytes showing floor/wall/door cells, furniture markers and room labels."""
    image = np.ones((tilemap.height, tilemap.width, 3))
    cache: Dict[str, tuple] = {}
    for tile in tilemap.tiles:
        if tile.layer == "furniture":
            continue
        if tile.sprite not in cache:
            cache[tile.sprite] = _rgb(_color_for(tile.sprite))
        image[tile.y, tile.x] = cache[tile.sprite]

    fig, ax = plt.subplots(figsize=(max(6, tilemap.width / 6), max(6, tilemap.height / 6)))
    ax.imshow(image, interpolation="nearest")

    furniture = [t for t in tilemap.tiles if t.layer == "furniture"]
    if furniture:
        ax.scatter([t.x for t in furniture], [t.y for t in furniture], marker="s", s=18,
                   color=FURNITURE_COLOR, zorder=5)
    for room in tilemap.rooms:
        ax.text(room.x + room.width / 2 - 0.5, room.y + room.height / 2 - 0.5, room.name,
                ha="center", va="center", fontsize=7, zorder=6,
                bbox=dict(boxstyle="round,pad=0.2", facecolor="white", alpha=0.7, linewidth=0))

    ax.set_xlim(-0.5, tilemap.width - 0.5)
    ax.set_ylim(tilemap.height - 0.5, -0.5)
    ax.set_aspect("equal")
    ax.axis("off")
    if title:
        ax.set_title(title, fontsize=14, fontweight="bold")

    buf = io.BytesIO()
    plt.savefig(buf, format="png", bbox_inches="tight")
    plt.close(fig)
    return buf.getvalue()


def render_preview_base64(tilemap: TileMap, title: Optional[str] = "Tile Map") -> str:
    return base64.b64encode(render_preview(tilemap, title)).decode("utf-8")
