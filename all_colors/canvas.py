"""Fixed-size BGR pixel grid with a sentinel marking unfilled cells."""

from typing import Sequence, Tuple

import numpy as np

from .config import SENTINEL_COLOR, Color, ConfigurationError, Position


class CanvasWriteError(RuntimeError):
    """An illegal write: out of bounds, overwrite, or writing the sentinel."""


class Canvas:
    """Position -> color mapping over a ``width x height`` rectangle.

    Pixels live in a ``(height, width, 3)`` uint8 array indexed ``[y, x]``.
    A cell that holds a non-sentinel color is never overwritten.
    """

    def __init__(self, width: int, height: int, sentinel: Sequence[int] = SENTINEL_COLOR):
        if width <= 0 or height <= 0:
            raise ConfigurationError(f"Canvas must have a positive area, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.sentinel: Color = tuple(int(c) for c in sentinel)  # type: ignore[assignment]
        self._sentinel_arr = np.asarray(self.sentinel, dtype=np.uint8)
        self.pixels = np.empty((self.height, self.width, 3), dtype=np.uint8)
        self.pixels[:] = self._sentinel_arr

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    def in_bounds(self, pos: Position) -> bool:
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, pos: Position) -> Color:
        x, y = pos
        b, g, r = self.pixels[y, x]
        return int(b), int(g), int(r)

    def is_empty(self, pos: Position) -> bool:
        x, y = pos
        return bool(np.array_equal(self.pixels[y, x], self._sentinel_arr))

    def set(self, pos: Position, color: Sequence[int]) -> None:
        if not self.in_bounds(pos):
            raise CanvasWriteError(f"Position {pos} outside {self.width}x{self.height} canvas")
        if not self.is_empty(pos):
            raise CanvasWriteError(f"Position {pos} already holds {self.get(pos)}")
        value = np.asarray(color, dtype=np.uint8)
        if np.array_equal(value, self._sentinel_arr):
            raise CanvasWriteError(f"Cannot place the sentinel color at {pos}")
        x, y = pos
        self.pixels[y, x] = value

    def filled_mask(self) -> np.ndarray:
        """Boolean ``(height, width)`` array, True where a color was placed."""
        return np.any(self.pixels != self._sentinel_arr, axis=-1)

    def filled_count(self) -> int:
        return int(np.count_nonzero(self.filled_mask()))

    def snapshot(self) -> np.ndarray:
        """Defensive copy of the pixel grid for readers outside the loop."""
        return self.pixels.copy()

    def __repr__(self) -> str:
        return f"Canvas({self.width}x{self.height}, filled={self.filled_count()})"
