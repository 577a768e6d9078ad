from pydantic import BaseModel, ConfigDict, StrictInt
from typing import Any, Literal, Optional, Union

# Inbound message types
MSG_JOIN = "join"
MSG_REQUEST_INIT = "requestInit"
MSG_STATE = "state"
MSG_COLLECT = "collect"

# Outbound event types
MSG_INIT = "init"
MSG_COIN_UPDATE = "coinUpdate"
MSG_PLAYER_JOINED = "playerJoined"
MSG_PLAYER_LEFT = "playerLeft"

# Relayed to peers untouched, whatever the client put there
ColorHex = Any
Coord = Optional[float]
CoinTally = Optional[Union[int, float]]


# ---- client -> server ----

class InboundMessage(BaseModel):
    # numeric player ids and room names are kept, as strings
    model_config = ConfigDict(coerce_numbers_to_str=True)

class JoinMessage(InboundMessage):
    type: Literal["join"]
    room: Optional[str] = None
    id: Optional[str] = None
    colorHex: ColorHex = None

class RequestInitMessage(InboundMessage):
    type: Literal["requestInit"]
    room: Optional[str] = None

class StateMessage(InboundMessage):
    type: Literal["state"]
    room: Optional[str] = None
    x: Coord = None
    y: Coord = None
    z: Coord = None
    colorHex: ColorHex = None
    coins: CoinTally = 0

class CollectMessage(InboundMessage):
    type: Literal["collect"]
    room: Optional[str] = None
    # coin ids are looked up as-is; "3" is not coin 3
    id: StrictInt
    player: Optional[str] = None


# ---- server -> client ----

class PlayerSnapshot(BaseModel):
    id: str
    x: Coord = None
    y: Coord = None
    z: Coord = None
    colorHex: ColorHex = None
    coins: CoinTally = 0

class CoinSnapshot(BaseModel):
    id: int
    x: int
    z: int
    active: bool

class InitEvent(BaseModel):
    type: Literal["init"] = MSG_INIT
    coins: list[CoinSnapshot]
    players: list[PlayerSnapshot]

class StateEvent(PlayerSnapshot):
    type: Literal["state"] = MSG_STATE

class CoinUpdateEvent(BaseModel):
    type: Literal["coinUpdate"] = MSG_COIN_UPDATE
    id: int
    active: bool
    x: Optional[int] = None
    z: Optional[int] = None

class PlayerJoinedEvent(BaseModel):
    type: Literal["playerJoined"] = MSG_PLAYER_JOINED
    id: str
    x: Coord = 0.0
    y: Coord = 0.0
    z: Coord = 0.0
    colorHex: ColorHex = None

class PlayerLeftEvent(BaseModel):
    type: Literal["playerLeft"] = MSG_PLAYER_LEFT
    id: str
