import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Socket.IO (empty picks eventlet or threading per platform)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    # Countdown
    COUNTDOWN_TICK_SEC = float(os.environ.get("COUNTDOWN_TICK_SEC", "1.0"))
    COUNTDOWN_RESOLVE_DELAY_SEC = float(os.environ.get("COUNTDOWN_RESOLVE_DELAY_SEC", "0.5"))
    COUNTDOWN_INLINE = os.environ.get("COUNTDOWN_INLINE", "0") == "1"

    # Rooms
    ROOM_CODE_LENGTH = int(os.environ.get("ROOM_CODE_LENGTH", "6"))
    MAX_NAME_LENGTH = int(os.environ.get("MAX_NAME_LENGTH", "16"))
