"""Identifier scheme for new storage objects and identities."""

import secrets
import time


def unique_id(padding: int = 7) -> str:
    """
    Generate an id in the Appwrite ``ID.unique()`` format.

    Hex seconds since the epoch, five hex digits of milliseconds, then
    ``padding`` random hex digits. Never derived from a filename, so two
    uploads with the same name cannot collide.

    Args:
        padding: Number of random hex digits appended

    Returns:
        Identifier string (20 characters with the default padding)
    """
    now = time.time()
    seconds = int(now)
    millis = int((now - seconds) * 1000)
    random_part = "".join(secrets.choice("0123456789abcdef") for _ in range(padding))
    return f"{seconds:x}{millis:05x}{random_part}"
