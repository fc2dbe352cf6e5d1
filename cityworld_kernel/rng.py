"""
Random streams for the kernel.

A seeded run derives its stream from `seed XOR cycle`, so the same
(seed, cycle) pair always reproduces the same draws. Without a seed the
kernel falls back to a non-deterministic source.

Every component draws from one shared stream, strictly in call order.
"""

import math
import random
from typing import Optional, Protocol, Sequence, TypeVar

T = TypeVar("T")

_MASK = 0xFFFFFFFF


class RandomSource(Protocol):
    """Anything that returns uniform floats in [0, 1)."""

    def random(self) -> float: ...


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK


class Mulberry32:
    """Mulberry32 generator over unsigned 32-bit state."""

    def __init__(self, seed: int):
        self._state = seed & _MASK

    def random(self) -> float:
        self._state = (self._state + 0x6D2B79F5) & _MASK
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK
        return ((t ^ (t >> 14)) & _MASK) / 4294967296


def make_rng(seed: Optional[int], cycle: int) -> RandomSource:
    """Build the stream for one cycle."""
    if seed is None:
        return random.Random()
    return Mulberry32((seed ^ cycle) & _MASK)


def round_half_up(value: float) -> int:
    """Round half up, matching the rounding the seeded runs were recorded with."""
    return int(math.floor(value + 0.5))


def pick_index(rng: RandomSource, length: int) -> int:
    return int(rng.random() * length)


def pick(rng: RandomSource, items: Sequence[T]) -> T:
    return items[pick_index(rng, len(items))]
