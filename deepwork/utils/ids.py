"""Opaque id generation shared by projects and sessions."""

from __future__ import annotations

import random
import string
import time

_SUFFIX_ALPHABET = string.digits + string.ascii_lowercase


def generate_id() -> str:
    """Return a millisecond timestamp followed by three random base-36 characters."""
    suffix = "".join(random.choice(_SUFFIX_ALPHABET) for _ in range(3))
    return f"{int(time.time() * 1000)}{suffix}"
