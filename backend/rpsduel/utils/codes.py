from __future__ import annotations

import secrets
import string

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_room_code(length: int = 6) -> str:
    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(length))


def normalize_room_code(raw: object) -> str:
    return str(raw or "").strip().upper()
