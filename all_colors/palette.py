"""Palette enumeration and the stack the placement engine consumes.

Every color of a per-channel quantization lattice is enumerated once,
shuffled with the run RNG and then stably sorted by an HSV key.  The shuffle
decides the order among colors that share a key; the sort gives the mosaic
its overall color arrangement.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from .color import bgr_to_hsv
from .config import DEFAULT_LEVELS, SENTINEL_COLOR, Color, ConfigurationError, SortKey

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {SortKey.HUE: 0, SortKey.SATURATION: 1, SortKey.VALUE: 2}


def channel_values(levels: int) -> np.ndarray:
    """Lattice values ``k * (256 // (levels + 1))`` for ``k`` in ``1..levels``.

    Index 0 is skipped so an all-zero sentinel is never produced.
    """
    if levels < 1 or levels > 255:
        raise ConfigurationError(f"Lattice levels must be in 1..255, got {levels}")
    step = 256 // (levels + 1)
    return np.arange(1, levels + 1, dtype=np.int64) * step


def enumerate_lattice(
    levels: Sequence[int] = DEFAULT_LEVELS,
    sentinel: Sequence[int] = SENTINEL_COLOR,
) -> np.ndarray:
    """All lattice colors as an ``(N, 3)`` uint8 BGR array, sentinel excluded."""
    if len(levels) != 3:
        raise ConfigurationError(f"Expected three channel levels, got {levels}")
    b_vals, g_vals, r_vals = (channel_values(level) for level in levels)
    b, g, r = np.meshgrid(b_vals, g_vals, r_vals, indexing="ij")
    colors = np.stack([b.ravel(), g.ravel(), r.ravel()], axis=-1).astype(np.uint8)
    keep = np.any(colors != np.asarray(sentinel, dtype=np.uint8), axis=-1)
    return colors[keep]


def sort_colors(
    colors: np.ndarray,
    sort_key: SortKey = SortKey.HUE,
    descending: bool = False,
) -> np.ndarray:
    """Stable sort by one HSV component."""
    if len(colors) == 0:
        return colors
    keys = bgr_to_hsv(colors)[:, _SORT_COLUMNS[SortKey(sort_key)]]
    if descending:
        keys = -keys
    order = np.argsort(keys, kind="stable")
    return colors[order]


def generate_palette(
    levels: Sequence[int] = DEFAULT_LEVELS,
    rng: Optional[np.random.Generator] = None,
    sentinel: Sequence[int] = SENTINEL_COLOR,
    sort_key: SortKey = SortKey.HUE,
    descending: bool = False,
) -> np.ndarray:
    """Enumerate, shuffle, then stably sort the lattice."""
    rng = rng if rng is not None else np.random.default_rng(0)
    colors = enumerate_lattice(levels, sentinel)
    colors = colors[rng.permutation(len(colors))]
    colors = sort_colors(colors, sort_key, descending)
    logger.debug(
        "Generated palette: %d colors (levels=%s, sort=%s%s)",
        len(colors), tuple(levels), SortKey(sort_key).value,
        " desc" if descending else "",
    )
    return colors


class PaletteQueue:
    """Colors to place, consumed from the end and never re-inserted."""

    def __init__(self, colors):
        arr = np.asarray(colors, dtype=np.uint8).reshape(-1, 3)
        self._colors = arr.copy()
        self._end = len(arr)

    def __len__(self) -> int:
        return self._end

    @property
    def empty(self) -> bool:
        return self._end == 0

    @property
    def total(self) -> int:
        return len(self._colors)

    def peek(self) -> Color:
        if self.empty:
            raise IndexError("peek from an empty palette")
        b, g, r = self._colors[self._end - 1]
        return int(b), int(g), int(r)

    def pop(self) -> Color:
        color = self.peek()
        self._end -= 1
        return color

    def remaining(self) -> np.ndarray:
        """Unconsumed colors in consumption order reversed (next color last)."""
        return self._colors[: self._end].copy()

    def __repr__(self) -> str:
        return f"PaletteQueue(remaining={self._end}, total={self.total})"

