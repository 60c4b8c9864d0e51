import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Sync
    SYNC_INTERVAL_SEC = float(os.environ.get("SYNC_INTERVAL_SEC", "0.5"))
    COMMAND_LATENCY_SEC = float(os.environ.get("COMMAND_LATENCY_SEC", "0.1"))
    # 0 keeps abandoned rooms until every player has left.
    ROOM_IDLE_TTL_SEC = int(os.environ.get("ROOM_IDLE_TTL_SEC", "0"))

    # Game
    HINT_MAX_LENGTH = int(os.environ.get("HINT_MAX_LENGTH", "50"))
    DEFAULT_MIN_PLAYERS = int(os.environ.get("DEFAULT_MIN_PLAYERS", "3"))
    DEFAULT_MAX_PLAYERS = int(os.environ.get("DEFAULT_MAX_PLAYERS", "10"))
    DEFAULT_IMPOSTOR_COUNT = int(os.environ.get("DEFAULT_IMPOSTOR_COUNT", "1"))
