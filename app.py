from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager, suppress
import asyncio

from backend import room_registry
from broadcast import Connection
from constants import ALLOWED_ORIGINS, LOG_FILE, LOG_LEVEL
from routers.messages import MessageRouter
from routers.rooms import rooms_router
from schemas.rooms import HealthResponse
from logging_config import get_logger, setup_logging

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)

# Connection -> (player, room) association lives in the router
message_router = MessageRouter(room_registry)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        yield
    finally:
        # no respawn callback may outlive the process' rooms
        room_registry.close_all()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rooms_router)

logger.info("FastAPI application initialized")


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(ok=True, rooms=len(room_registry))


def _frame_text(message: dict):
    text = message.get("text")
    if text is not None:
        return text
    data = message.get("bytes")
    if data is not None:
        return data.decode("utf-8", errors="replace")
    return None


@app.websocket("/")
@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """Game sync socket. One connection per browser tab; the player id arrives in ``join``."""
    await websocket.accept()
    connection = Connection(websocket)
    writer = asyncio.create_task(connection.pump())
    logger.info(f"WebSocket connection accepted: {connection.connection_id}")

    message_count = 0
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info(f"WebSocket disconnected normally for connection {connection.connection_id}")
                break
            raw = _frame_text(message)
            if raw is None:
                continue
            message_count += 1
            logger.debug(f"Received message #{message_count} from connection {connection.connection_id}")
            message_router.dispatch(connection, raw)
    except Exception as e:
        logger.error(f"WebSocket error for connection {connection.connection_id}: {e}", exc_info=True)
    finally:
        message_router.disconnect(connection)
        connection.close()
        with suppress(asyncio.CancelledError):
            await writer
        logger.info(f"Connection {connection.connection_id} closed after {message_count} messages")
