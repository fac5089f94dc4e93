"""
Seeded random source. Same seed string, same sequence.

Not cryptographic: a 32-bit string hash feeds a small linear congruential
generator, which is enough for shuffling 28 dominoes and picking templates.
"""
from typing import List, Sequence, TypeVar

T = TypeVar("T")

LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280


def hash_seed(seed: str) -> int:
    """31*h + ch over the string, wrapped to signed 32 bits, absolute value."""
    h = 0
    for ch in seed:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


class SeededRandom:
    def __init__(self, seed: str):
        self.seed = seed
        self.state = hash_seed(seed)

    def next(self) -> float:
        """Float in [0, 1)"""
        self.state = (self.state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self.state / LCG_MODULUS

    def randint(self, lo: int, hi: int) -> int:
        """Integer in [lo, hi], both ends inclusive"""
        return int(self.next() * (hi - lo + 1)) + lo

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise IndexError("cannot choose from an empty sequence")
        return items[self.randint(0, len(items) - 1)]

    def shuffle(self, items: Sequence[T]) -> List[T]:
        """Fisher-Yates on a copy; the input is not modified."""
        out = list(items)
        for i in range(len(out) - 1, 0, -1):
            j = self.randint(0, i)
            out[i], out[j] = out[j], out[i]
        return out

    def __repr__(self):
        return f"SeededRandom(seed={self.seed!r})"
