from pydantic import BaseModel
from schemas.messages import PlayerSnapshot


class RoomSummary(BaseModel):
    name: str
    online_count: int
    active_coins: int
    total_coins: int

class RoomDetailsResponse(BaseModel):
    name: str
    created_at: str
    online_count: int
    players: list[PlayerSnapshot]
    active_coins: int
    total_coins: int
    pending_respawns: int

class HealthResponse(BaseModel):
    ok: bool
    rooms: int
