from fastapi import APIRouter, HTTPException
from backend import room_registry
from schemas.rooms import RoomSummary, RoomDetailsResponse
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.get("/", response_model=list[RoomSummary])
async def list_rooms():
    rooms = room_registry.rooms()
    logger.debug(f"Listing {len(rooms)} rooms")
    return [
        RoomSummary(
            name=room.name,
            online_count=len(room.connections),
            active_coins=room.coins.active_count,
            total_coins=len(room.coins),
        )
        for room in rooms
    ]


@rooms_router.get("/{room_name}", response_model=RoomDetailsResponse)
async def get_room_details(room_name: str):
    """
    Get details of a live room. Looking a room up never creates it.

    Returns:
    - name: Room name
    - created_at: Room creation timestamp
    - online_count: Number of open connections in the room
    - players: Current player records
    - active_coins / total_coins: Collectible coins right now vs. coins in the room
    - pending_respawns: Collected coins waiting to respawn
    """
    room = room_registry.get_room(room_name)
    if not room:
        logger.info(f"Room details failed: Room {room_name} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    return RoomDetailsResponse(
        name=room.name,
        created_at=room.created_at,
        online_count=len(room.connections),
        players=room.players.snapshot(),
        active_coins=room.coins.active_count,
        total_coins=len(room.coins),
        pending_respawns=len(room.coins.pending_respawns()),
    )
