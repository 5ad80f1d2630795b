# tileplan/errors.py
from typing import List, Optional


class GenerationError(Exception):
    """Base class for errors raised by the tile plan engine."""


class InvalidRoomGraph(GenerationError, ValueError):
    """Raised before layout when a RoomGraph is malformed. No partial generation happens."""

    def __init__(self, errors: List[str], message: Optional[str] = None):
        self.errors = list(errors)
        super().__init__(message or "Invalid room graph: " + "; ".join(self.errors))
