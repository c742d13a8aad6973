"""Anonymous device identifiers used to deduplicate votes.

Identifiers are opaque, unauthenticated correlation keys: a client that
clears its storage gets a new one.
"""
import secrets
import string
import time

_ALPHABET = string.digits + string.ascii_lowercase
MAX_DEVICE_ID_LENGTH = 128


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_device_id() -> str:
    """Return a new identifier of the form ``<base36 millis>-<13 random base36 chars>``."""
    timestamp = _to_base36(int(time.time() * 1000))
    random_part = "".join(secrets.choice(_ALPHABET) for _ in range(13))
    return f"{timestamp}-{random_part}"


def is_valid_device_id(device_id: str | None) -> bool:
    """Accept any non-blank printable identifier that fits the storage column."""
    if not device_id or not device_id.strip():
        return False
    return len(device_id) <= MAX_DEVICE_ID_LENGTH and device_id.isprintable()
