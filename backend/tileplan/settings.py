# tileplan/settings.py
from dataclasses import dataclass, field
from typing import Mapping

from tileplan.constants import DEFAULT_FURNITURE_RULE, FURNITURE_RULES, FurnitureRule


@dataclass(frozen=True)
class GenerationSettings:
    door_width: int = 2
    corridor_width: int = 2       # width of passages dug by connectivity repair
    min_room_dim: int = 5         # smallest outer BSP leaf side
    furnish_empty_rooms: bool = True
    mirror: bool = True           # geometric generator mirrors side rooms
    cave_fill: float = 0.45
    smoothing_steps: int = 4
    decoration_chance: float = 0.05
    furniture_rules: Mapping[str, FurnitureRule] = field(default_factory=lambda: FURNITURE_RULES)
    default_rule: FurnitureRule = DEFAULT_FURNITURE_RULE

    def __post_init__(self):
        if self.door_width < 1:
            raise ValueError("door_width must be at least 1")
        if self.corridor_width < 1:
            raise ValueError("corridor_width must be at least 1")
        if self.min_room_dim < 3:
            raise ValueError("min_room_dim must leave room for a wall ring and one floor cell")
