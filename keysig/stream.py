"""
Seeded pseudo-random stream.

A 32-bit FNV-1a hash of the seed string seeds a xorshift32 generator, so the
same seed always yields the same sequence of draws.
"""

from typing import Callable

import numpy as np

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193
UINT32_MASK = 0xFFFFFFFF
UINT32_MAX = 0xFFFFFFFF


def utf16_code_units(text: str) -> np.ndarray:
    """UTF-16 code units of ``text``; astral characters become surrogate pairs."""
    return np.frombuffer(text.encode("utf-16-le"), dtype="<u2")


def fnv1a32(text: str) -> int:
    """32-bit FNV-1a over the UTF-16 code units of ``text``, unsigned."""
    h = FNV_OFFSET_BASIS
    for unit in utf16_code_units(text).tolist():
        h ^= unit
        h = (h * FNV_PRIME) & UINT32_MASK
    return h


def hash_hex(text: str) -> str:
    return f"{fnv1a32(text):08x}"


def xorshift32(state: int) -> int:
    state ^= (state << 13) & UINT32_MASK
    state ^= state >> 17
    state ^= (state << 5) & UINT32_MASK
    return state


def make_stream(seed: str) -> Callable[[], float]:
    """
    Return a callable producing deterministic floats in [0, 1].

    A seed hashing to zero is replaced by 1, since xorshift never leaves zero.
    """
    state = fnv1a32(seed) or 1

    def next_value() -> float:
        nonlocal state
        state = xorshift32(state)
        return state / UINT32_MAX

    return next_value


def signature_seed(name: str, layout_id: str) -> str:
    """Seed string for a whole signature."""
    return f"{layout_id}|{name}"
