"""
Redirect id generation.

Ids are `<time><random>`: the current time in milliseconds encoded in Base62,
followed by a random Base62 suffix drawn from SystemRandom. The time prefix
keeps ids roughly sortable; the suffix keeps concurrent creations apart.

    >>> new_redirect_id()            # doctest: +SKIP
    'lrx3KZ1b9Qm2xT4p'
"""

import random
import time
from typing import Optional

_BASE62_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
_BASE62_BASE = len(_BASE62_ALPHABET)

_rng = random.SystemRandom()


def base62_encode(num: int) -> str:
    """
    Convert a non-negative integer to a Base62 string.
    0 -> "0", 61 -> "Z", 62 -> "10"
    """
    if num < 0:
        raise ValueError("num must be non-negative")
    if num == 0:
        return "0"
    out = []
    while num > 0:
        num, rem = divmod(num, _BASE62_BASE)
        out.append(_BASE62_ALPHABET[rem])
    return "".join(reversed(out))


def random_base62(length: int) -> str:
    return "".join(_rng.choice(_BASE62_ALPHABET) for _ in range(length))


def new_redirect_id(suffix_length: int = 8, now_ms: Optional[int] = None) -> str:
    """Return a fresh redirect id."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return base62_encode(now_ms) + random_base62(suffix_length)
