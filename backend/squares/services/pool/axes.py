import random
from typing import List, Sequence

DIGITS = tuple(range(10))


def generate_axis(rng=random) -> List[int]:
    """Return a uniformly random ordering of the digits 0-9.

    Walks i from 9 down to 1 and swaps position i with a random j in [0, i].
    """
    digits = list(DIGITS)
    for i in range(len(digits) - 1, 0, -1):
        j = rng.randrange(i + 1)
        digits[i], digits[j] = digits[j], digits[i]
    return digits


def is_permutation(axis: Sequence) -> bool:
    try:
        return len(axis) == 10 and sorted(axis) == list(DIGITS)
    except TypeError:
        return False
