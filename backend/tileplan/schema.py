# tileplan/schema.py
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from tileplan.errors import InvalidRoomGraph

MIN_CANVAS, MAX_CANVAS = 40, 60
STYLES = ("structured", "organic", "geometric")
TONES = ("Normal", "Sepia", "Night", "Toxic")


# === Input: RoomGraph ===
class RoomSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str = ""
    type: str = Field(min_length=1)
    connections: Tuple[str, ...] = ()
    furniture: Tuple[str, ...] = ()
    # floor cells, walls excluded
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)

    @model_validator(mode="before")
    @classmethod
    def _name_defaults_to_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("name"):
            data = {**data, "name": data.get("id", "")}
        return data

    @field_validator("type")
    @classmethod
    def _normalise_type(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("room type must not be blank")
        return v


class RoomGraph(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int = Field(ge=MIN_CANVAS, le=MAX_CANVAS)
    height: int = Field(ge=MIN_CANVAS, le=MAX_CANVAS)
    rooms: Tuple[RoomSpec, ...] = Field(min_length=1)
    description: str = ""
    # style tag and colour tone from the authoring schema
    type: str = "structured"
    tone: str = "Normal"

    @model_validator(mode="after")
    def _check_references(self) -> "RoomGraph":
        problems: List[str] = []
        seen, dupes = set(), []
        for room in self.rooms:
            if room.id in seen and room.id not in dupes:
                dupes.append(room.id)
            seen.add(room.id)
        if dupes:
            problems.append(f"duplicate room id(s): {', '.join(dupes)}")
        for room in self.rooms:
            for target in room.connections:
                if target == room.id:
                    problems.append(f"room '{room.id}' connects to itself")
                elif target not in seen:
                    problems.append(f"room '{room.id}' connects to unknown room '{target}'")
        if problems:
            raise ValueError("; ".join(problems))
        return self

    def room(self, room_id: str) -> Optional[RoomSpec]:
        return next((r for r in self.rooms if r.id == room_id), None)

    @property
    def room_ids(self) -> List[str]:
        return [r.id for r in self.rooms]


def _describe(exc: ValidationError) -> List[str]:
    errors = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        errors.append(f"{loc}: {msg}" if loc else msg)
    return errors


def parse_room_graph(data: Any) -> RoomGraph:
    """Validates raw input into a RoomGraph, raising InvalidRoomGraph with every problem found."""
    if isinstance(data, RoomGraph):
        return data
    if not isinstance(data, dict):
        raise InvalidRoomGraph([f"expected a JSON object, got {type(data).__name__}"])
    try:
        return RoomGraph.model_validate(data)
    except ValidationError as e:
        raise InvalidRoomGraph(_describe(e)) from e


# === Output: TileMap ===
Layer = Literal["floor", "wall", "furniture"]
Rotation = Literal[0, 90, 180, 270]


class Tile(BaseModel):
    x: int
    y: int
    sprite: str
    rotation: Optional[Rotation] = None
    layer: Layer


class DoorCell(BaseModel):
    x: int
    y: int


class RoomData(BaseModel):
    id: str
    name: str
    type: str
    x: int
    y: int
    width: int
    height: int
    doors: List[DoorCell] = []


class TileMap(BaseModel):
    width: int
    height: int
    tiles: List[Tile]
    rooms: List[RoomData]

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def to_json(self, indent: Optional[int] = None) -> str:
        return self.model_dump_json(exclude_none=True, indent=indent)

    def room(self, room_id: str) -> Optional[RoomData]:
        return next((r for r in self.rooms if r.id == room_id), None)
