"""Deterministic per-identifier randomness for the demo feeds."""

import hashlib
import random


def seeded_rng(identifier: str, salt: str) -> random.Random:
    """Same (identifier, salt) -> same sequence, across processes."""
    digest = hashlib.blake2b(f"{salt}:{identifier}".encode("utf-8"), digest_size=8).digest()
    return random.Random(int.from_bytes(digest, "big"))
