import json
import random
import string
from dataclasses import dataclass
from typing import Dict, Optional

from pydantic import ValidationError

from backend import RoomRegistry
from constants import DEFAULT_ROOM
from logging_config import get_logger
from schemas.messages import (
    MSG_COLLECT,
    MSG_JOIN,
    MSG_REQUEST_INIT,
    MSG_STATE,
    CollectMessage,
    JoinMessage,
    RequestInitMessage,
    StateMessage,
)

logger = get_logger(__name__)


def generate_player_id(length: int = 7) -> str:
    return "p" + "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


@dataclass
class ConnectionContext:
    player_id: str
    room_name: str


class MessageRouter:
    """Decodes inbound frames and dispatches them to the room registry.

    Which player and room a connection belongs to is tracked here, keyed by
    connection id, and looked up on every message.
    """

    def __init__(self, registry: RoomRegistry):
        self.registry = registry
        self._contexts: Dict[str, ConnectionContext] = {}
        # connection id -> room it fetched a snapshot of before joining
        self._reservations: Dict[str, str] = {}
        self._handlers = {
            MSG_JOIN: (JoinMessage, self.handle_join),
            MSG_REQUEST_INIT: (RequestInitMessage, self.handle_request_init),
            MSG_STATE: (StateMessage, self.handle_state),
            MSG_COLLECT: (CollectMessage, self.handle_collect),
        }

    def context_for(self, connection) -> Optional[ConnectionContext]:
        return self._contexts.get(connection.connection_id)

    def dispatch(self, connection, raw) -> None:
        """Handle one inbound frame. Never raises."""
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError, ValueError):
            logger.debug(f"Dropping unparseable message from connection {connection.connection_id}")
            return
        if not isinstance(data, dict) or not isinstance(data.get("type"), str):
            logger.debug(f"Dropping message without type from connection {connection.connection_id}")
            return

        entry = self._handlers.get(data["type"])
        if entry is None:
            logger.debug(f"Ignoring unknown message type {data['type']!r} from connection {connection.connection_id}")
            return
        model, handler = entry

        try:
            message = model.model_validate(data)
        except ValidationError as e:
            logger.debug(f"Dropping malformed {data['type']} message from connection {connection.connection_id}: {e}")
            return

        try:
            handler(connection, message)
        except Exception as e:
            logger.error(f"Error handling {data['type']} from connection {connection.connection_id}: {e}", exc_info=True)

    def handle_join(self, connection, message: JoinMessage):
        room_name = message.room or DEFAULT_ROOM
        player_id = message.id or generate_player_id()

        previous = self._contexts.get(connection.connection_id)
        if previous is not None:
            logger.info(f"Connection {connection.connection_id} re-joining, leaving room {previous.room_name}")
            self._leave(connection, previous)

        room = self.registry.ensure_room(room_name)
        self._contexts[connection.connection_id] = ConnectionContext(player_id=player_id, room_name=room_name)
        room.join(connection, player_id, message.colorHex)
        logger.info(f"Player {player_id} joined room {room_name} ({len(room.connections)} connections)")
        self._release(connection)

    def handle_request_init(self, connection, message: RequestInitMessage):
        room_name = message.room or DEFAULT_ROOM
        room = self.registry.ensure_room(room_name)
        room.send_snapshot(connection)
        logger.debug(f"Sent snapshot of room {room_name} to connection {connection.connection_id}")

        ctx = self._contexts.get(connection.connection_id)
        if ctx is not None and ctx.room_name == room_name:
            return
        # keep the snapshotted coin layout until this connection joins or goes away
        if self._reservations.get(connection.connection_id) != room_name:
            self._release(connection)
            room.reserve(connection)
            self._reservations[connection.connection_id] = room_name

    def handle_state(self, connection, message: StateMessage):
        ctx = self._contexts.get(connection.connection_id)
        if ctx is None:
            return
        room = self.registry.get_room(ctx.room_name)
        if room is None:
            return
        room.update_state(connection, ctx.player_id, message.x, message.y, message.z,
                          message.colorHex, message.coins)

    def handle_collect(self, connection, message: CollectMessage):
        ctx = self._contexts.get(connection.connection_id)
        if ctx is None:
            return
        room = self.registry.get_room(ctx.room_name)
        if room is None:
            return
        room.collect_coin(message.id, message.player)

    def disconnect(self, connection) -> None:
        self._release(connection)
        ctx = self._contexts.pop(connection.connection_id, None)
        if ctx is None:
            return
        self._leave(connection, ctx)

    def _leave(self, connection, ctx: ConnectionContext):
        room = self.registry.get_room(ctx.room_name)
        if room is None:
            return
        room.leave(connection, ctx.player_id)
        logger.info(f"Player {ctx.player_id} left room {ctx.room_name}")
        self.registry.remove_room_if_empty(ctx.room_name)

    def _release(self, connection):
        room_name = self._reservations.pop(connection.connection_id, None)
        if room_name is None:
            return
        room = self.registry.get_room(room_name)
        if room is None:
            return
        room.release(connection)
        self.registry.remove_room_if_empty(room_name)
