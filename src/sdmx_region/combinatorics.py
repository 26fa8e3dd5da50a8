"""Cartesian products over index ranges and the sparse observation key encoding.

Observation keys are value indices joined with ``:`` in keyPosition order, for
example ``(0, 2, 1) -> "0:2:1"``. Indices are small non-negative integers, whose
decimal text never contains the delimiter, so distinct tuples of the same
length always encode to distinct keys.
"""

from __future__ import annotations

from itertools import product
from typing import Iterable, Sequence, TypeVar

T = TypeVar("T")

KEY_DELIMITER = ":"


def value_range(length: int) -> tuple[int, ...]:
    return tuple(range(max(int(length), 0)))


def array_product(arrays: Sequence[Sequence[T]]) -> list[tuple[T, ...]]:
    """Lexicographic cartesian product; the first array varies slowest.

    ``array_product([[0], [0, 1, 2], [0, 1]])`` gives
    ``[(0, 0, 0), (0, 0, 1), (0, 1, 0), (0, 1, 1), (0, 2, 0), (0, 2, 1)]``.
    An empty outer sequence yields no combinations.
    """
    if not arrays:
        return []
    return list(product(*arrays))


def encode_key(indices: Iterable[int]) -> str:
    parts: list[str] = []
    for index in indices:
        value = int(index)
        if value < 0:
            raise ValueError(f"observation key index must be non-negative: {value}")
        parts.append(str(value))
    return KEY_DELIMITER.join(parts)
