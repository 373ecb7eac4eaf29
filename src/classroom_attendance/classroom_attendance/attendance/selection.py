from __future__ import annotations

import random
from typing import List, Sequence, TypeVar

T = TypeVar("T")


def fisher_yates_shuffle(items: Sequence[T], rng: random.Random) -> List[T]:
    """Return an unbiased shuffled copy of ``items``.

    Walks from the last index down to 1 and swaps each slot with a uniformly
    chosen slot at an index <= i.
    """
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = rng.randint(0, i)
        out[i], out[j] = out[j], out[i]
    return out


def pick_random(items: Sequence[T], k: int, rng: random.Random) -> List[T]:
    """Pick ``min(k, len(items))`` distinct items."""
    if k <= 0:
        return []
    return fisher_yates_shuffle(items, rng)[:k]
