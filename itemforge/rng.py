"""
ItemForge - itemforge/rng.py
Seed derivation and generator plumbing.
=======================================
Version:     0.1
Stack:       Python 3.11+ | hashlib | random.Random

Every randomised entry point takes an explicit seed or a random.Random
instance. Module-level random.* functions are never used, so two calls with
the same seed agree regardless of what else consumed randomness.
"""

from __future__ import annotations

import hashlib
import random
from typing import Optional

SEED_BITS: int = 32


def derive_seed(base_seed: int, *discriminants: object) -> int:
    """
    Derives a stable child seed from a base seed plus discriminants
    (e.g. run seed + item index + base id).

    Uses blake2b rather than hash() so str discriminants give the same
    result in every process regardless of PYTHONHASHSEED.
    """
    h = hashlib.blake2b(digest_size=8)
    h.update(str(int(base_seed)).encode("utf-8"))
    for part in discriminants:
        h.update(b"\x1f")
        h.update(str(part).encode("utf-8"))
    return int.from_bytes(h.digest(), "big") >> (64 - SEED_BITS)


def make_rng(seed: Optional[int] = None, rng: Optional[random.Random] = None) -> random.Random:
    """Returns rng if given, else a generator seeded with seed, else a fresh unseeded one."""
    if rng is not None:
        return rng
    if seed is not None:
        return random.Random(seed)
    return random.Random()


def next_seed(rng: random.Random) -> int:
    """Draws a child seed from a running generator."""
    return rng.getrandbits(SEED_BITS)
