import asyncio
import json
import uuid
from typing import Iterable, Optional, Union

from fastapi import WebSocket
from pydantic import BaseModel
from starlette.websockets import WebSocketState

from constants import OUTBOX_MAX_MESSAGES
from logging_config import get_logger

logger = get_logger(__name__)

Event = Union[BaseModel, dict]


class Connection:
    """One accepted WebSocket plus its outbound queue.

    Sends only enqueue; ``pump()`` runs as a separate task and drains the
    queue, so a slow client never blocks the event loop or other rooms.
    """

    def __init__(self, websocket: WebSocket, connection_id: str = None, max_queue: int = OUTBOX_MAX_MESSAGES):
        self.websocket = websocket
        self.connection_id = connection_id or str(uuid.uuid4())
        self._outbox: asyncio.Queue = asyncio.Queue(maxsize=max_queue)
        self._closed = False

    @property
    def is_open(self) -> bool:
        if self._closed:
            return False
        return (self.websocket.client_state == WebSocketState.CONNECTED
                and self.websocket.application_state == WebSocketState.CONNECTED)

    def send(self, text: str) -> bool:
        if not self.is_open:
            return False
        try:
            self._outbox.put_nowait(text)
        except asyncio.QueueFull:
            logger.warning(f"Outbox full for connection {self.connection_id}, dropping message")
            return False
        return True

    async def pump(self):
        """Write queued frames until the connection is closed."""
        while True:
            text = await self._outbox.get()
            if text is None:
                break
            try:
                await self.websocket.send_text(text)
            except Exception as e:
                logger.debug(f"Send failed for connection {self.connection_id}: {e}")
                self._closed = True
                break

    def close(self):
        """Stop accepting frames and wake the writer so it can exit."""
        self._closed = True
        while True:
            try:
                self._outbox.put_nowait(None)
                return
            except asyncio.QueueFull:
                # backlog to a dead client is worthless
                self._outbox.get_nowait()

    def __repr__(self):
        return f"Connection({self.connection_id})"


def encode_event(event: Event) -> str:
    if isinstance(event, BaseModel):
        return event.model_dump_json(exclude_none=True)
    return json.dumps({k: v for k, v in event.items() if v is not None})


def broadcast(connections: Iterable, event: Event, exclude: Optional[object] = None) -> int:
    """Serialize ``event`` once and queue it on every open connection but ``exclude``.

    Closed connections are skipped here; removing them is the disconnect
    path's job. Returns the number of connections the event was queued on.
    """
    data = encode_event(event)
    delivered = 0
    for connection in list(connections):
        if connection is exclude:
            continue
        if not connection.is_open:
            continue
        if connection.send(data):
            delivered += 1
    return delivered


def unicast(connection, event: Event) -> bool:
    if not connection.is_open:
        return False
    return connection.send(encode_event(event))
