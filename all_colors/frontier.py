"""Frontier bookkeeping: the empty cells eligible for the next placement."""

from typing import Iterable, Iterator, Set

import numpy as np

from .canvas import Canvas
from .config import Position


def neighbour_offsets(radius: int) -> np.ndarray:
    """``(k, 2)`` array of ``(dx, dy)`` within Chebyshev ``radius``, centre excluded.

    Radius 1 is the 8-connected Moore neighbourhood.
    """
    if radius < 1:
        raise ValueError(f"radius must be >= 1, got {radius}")
    span = np.arange(-radius, radius + 1)
    dx, dy = np.meshgrid(span, span, indexing="ij")
    offsets = np.stack([dx.ravel(), dy.ravel()], axis=-1)
    return offsets[np.any(offsets != 0, axis=-1)]


def free_neighbours(canvas: Canvas, pos: Position, radius: int = 1) -> Set[Position]:
    """In-bounds, still-empty cells around ``pos``."""
    x, y = pos
    result: Set[Position] = set()
    for nx in range(x - radius, x + radius + 1):
        if nx < 0 or nx >= canvas.width:
            continue
        for ny in range(y - radius, y + radius + 1):
            if ny < 0 or ny >= canvas.height:
                continue
            if (nx, ny) == (x, y):
                continue
            if canvas.is_empty((nx, ny)):
                result.add((nx, ny))
    return result


class FrontierSet:
    """Unordered set of empty, in-bounds positions.

    Elements leave the set exactly once, when the engine commits them.
    """

    def __init__(self, positions: Iterable[Position] = ()):
        self._positions: Set[Position] = set()
        self.union(positions)

    def seed(self, canvas: Canvas, positions: Iterable[Position]) -> int:
        """Add initial positions, dropping out-of-bounds or filled ones.

        Returns the number of positions actually added.
        """
        before = len(self._positions)
        for pos in positions:
            pos = (int(pos[0]), int(pos[1]))
            if canvas.in_bounds(pos) and canvas.is_empty(pos):
                self._positions.add(pos)
        return len(self._positions) - before

    def contains(self, pos: Position) -> bool:
        return pos in self._positions

    __contains__ = contains

    def remove(self, pos: Position) -> None:
        """Raises ``KeyError`` when ``pos`` is not in the frontier."""
        self._positions.remove(pos)

    def union(self, positions: Iterable[Position]) -> None:
        self._positions.update((int(x), int(y)) for x, y in positions)

    def expand(self, canvas: Canvas, pos: Position, radius: int = 1) -> int:
        """Add the free neighbours of a committed position; returns how many were new."""
        before = len(self._positions)
        self._positions.update(free_neighbours(canvas, pos, radius))
        return len(self._positions) - before

    def as_array(self) -> np.ndarray:
        """Positions as an ``(n, 2)`` int array in current iteration order."""
        if not self._positions:
            return np.empty((0, 2), dtype=np.int64)
        return np.array(list(self._positions), dtype=np.int64)

    def __len__(self) -> int:
        return len(self._positions)

    def __iter__(self) -> Iterator[Position]:
        return iter(self._positions)

    def __bool__(self) -> bool:
        return bool(self._positions)

    def __repr__(self) -> str:
        return f"FrontierSet(size={len(self._positions)})"
