import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 8080))
RELOAD = os.getenv("RELOAD", "false").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

ALLOWED_ORIGINS = [origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()]

# Room / coin settings, fixed for the lifetime of the process
DEFAULT_ROOM = os.getenv("DEFAULT_ROOM", "default")
COIN_COUNT = int(os.getenv("COIN_COUNT", 32))
COIN_RESPAWN_MS = int(os.getenv("COIN_RESPAWN_MS", 45000))
WORLD_BOUND = int(os.getenv("WORLD_BOUND", 140))  # +/- area for random coin spawn

# Per-connection queue of pending outbound frames
OUTBOX_MAX_MESSAGES = int(os.getenv("OUTBOX_MAX_MESSAGES", 256))
