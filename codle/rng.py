"""
Deterministic PRNG for the daily puzzles.

xorshift32 seeded from SHA-256 of a text key. Not cryptographic: the secrecy
comes from the seed inside the key, the generator only has to be stable across
processes and releases. Changing anything here changes every future secret.
"""

import hashlib
from typing import Callable, List, TypeVar

T = TypeVar("T")

MASK_32 = 0xFFFFFFFF

# xorshift never leaves the all-zero state, so a zero seed is replaced by this
ZERO_STATE_FALLBACK = 0x9E3779B9


class Xorshift32:
    def __init__(self, state: int) -> None:
        state &= MASK_32
        if state == 0:
            state = ZERO_STATE_FALLBACK
        self.state = state

    @classmethod
    def from_text(cls, text: str) -> "Xorshift32":
        """Seed from the first 4 bytes (big-endian) of SHA-256(text)."""
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return cls(int.from_bytes(digest[:4], "big"))

    def next_u32(self) -> int:
        x = self.state
        x ^= (x << 13) & MASK_32
        x ^= x >> 17
        x ^= (x << 5) & MASK_32
        self.state = x
        return x

    def next_int(self, bound: int) -> int:
        """0 .. bound-1 by modulo."""
        return self.next_u32() % bound

    def next_percent(self) -> int:
        return self.next_int(100)

    def next_scaled(self, bound: int) -> int:
        """
        0 .. bound-1 by scaling the draw into [0, 1) first.
        Same as floor(next_u32() / 2**32 * bound), done in integers.
        """
        return (self.next_u32() * bound) >> 32


def shuffle_in_place(items: List[T], draw: Callable[[int], int]) -> List[T]:
    """Fisher-Yates from the last index down; draw(n) must return 0..n-1."""
    for i in range(len(items) - 1, 0, -1):
        j = draw(i + 1)
        items[i], items[j] = items[j], items[i]
    return items
