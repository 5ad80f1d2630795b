# app/models/requests.py
from pydantic import BaseModel
from typing import Optional, Dict, Any, Literal


class FreeformInput(BaseModel):
    text: str


class StructuredInput(BaseModel):
    room_graph: Dict[str, Any]


class GenerateTileMapRequest(BaseModel):
    mode: Literal["freeform", "structured"]
    freeform: Optional[FreeformInput] = None
    structured: Optional[StructuredInput] = None
    seed: Optional[int] = None
    style: Optional[str] = None    # structured | organic | geometric; defaults to the graph's own tag
    hint: Optional[str] = None     # may name a layout strategy: spine, hub, cluster, bsp
    preview: bool = False
