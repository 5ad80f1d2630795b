import logging
import random
from typing import Any, Dict, Optional

from app.services.validator import validate_tilemap
from tileplan.generator import get_generator
from tileplan.schema import parse_room_graph
from tileplan.settings import GenerationSettings

logger = logging.getLogger(__name__)


def generate_tilemap(room_graph: Any, seed: Optional[int] = None, style: Optional[str] = None,
                     hint: Optional[str] = None, settings: Optional[GenerationSettings] = None) -> Dict[str, Any]:
    """Runs one generation and checks the result. Synchronous: call it off the event loop."""
    graph = parse_room_graph(room_graph)
    if seed is None:
        # echo a concrete seed back so any run can be reproduced
        seed = random.randrange(2 ** 31)
    style = (style or graph.type or "structured").lower()

    generator = get_generator(style, settings, seed, hint)
    tilemap = generator.generate(graph)

    ok, problems = validate_tilemap(tilemap, generator.furniture, root_id=generator.anchor_id,
                                    room_ids=graph.room_ids, rules=generator.settings.furniture_rules)
    for p in problems:
        logger.warning("Generated tile map check failed: %s", p)

    dropped = [rid for rid in graph.room_ids if tilemap.room(rid) is None]
    warnings = [f"room '{rid}' could not be placed" for rid in dropped] + problems
    return {
        "tilemap": tilemap,
        "style": generator.style,
        "strategy": generator.strategy,
        "anchor_id": generator.anchor_id,
        "tone": graph.tone,
        "seed": seed,
        "warnings": warnings,
    }
