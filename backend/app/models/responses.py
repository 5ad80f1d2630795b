from pydantic import BaseModel
from typing import List, Optional

from tileplan.schema import TileMap


class GenerationResponse(BaseModel):
    tilemap: TileMap
    style: str
    strategy: Optional[str] = None
    anchor_id: Optional[str] = None
    tone: str = "Normal"
    seed: int
    image_base64: Optional[str] = None
    status: Optional[str] = None
    message: Optional[str] = None
    warnings: List[str] = []

