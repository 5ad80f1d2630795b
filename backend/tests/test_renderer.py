import base64

from app.services.renderer import _color_for, DEFAULT_COLORS, render_preview, render_preview_base64
from tileplan.generator import generate

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def test_preview_is_png(spine_graph):
    data = render_preview(generate(spine_graph, seed=4))
    assert data.startswith(PNG_MAGIC)


def test_preview_base64_round_trips(spine_graph):
    text = render_preview_base64(generate(spine_graph, seed=4), title=None)
    assert base64.b64decode(text).startswith(PNG_MAGIC)


def test_sprite_colors():
    assert _color_for("wall_brick") == DEFAULT_COLORS["wall"]
    assert _color_for("door_wood") == DEFAULT_COLORS["door"]
    assert _color_for("floor_stone") == DEFAULT_COLORS["hall"]
    assert _color_for("floor_grass") == DEFAULT_COLORS["grass"]
    assert _color_for("something_else") == DEFAULT_COLORS["other"]
