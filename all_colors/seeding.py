"""Initial frontier positions: named plus-shaped layouts or a monochrome mask."""

import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Set, Tuple, Union

import numpy as np
from PIL import Image

from .config import (
    DEFAULT_ARM_LENGTH,
    DEFAULT_MASK_THRESHOLD,
    SEED_LAYOUTS,
    ConfigurationError,
    Position,
)

logger = logging.getLogger(__name__)


def layout_anchors(layout: str, width: int, height: int) -> List[Position]:
    """Anchor cells of a named layout, scaled to the canvas."""
    try:
        fractions = SEED_LAYOUTS[str(layout)]
    except KeyError:
        raise ConfigurationError(
            f"Unknown seed layout {layout!r}; choose from {sorted(SEED_LAYOUTS)}"
        ) from None
    return [(int(fx * width), int(fy * height)) for fx, fy in fractions]


def plus_shape(anchor: Position, arm_length: int = DEFAULT_ARM_LENGTH) -> Set[Position]:
    """Horizontal and vertical arm of ``arm_length`` cells on each side of ``anchor``."""
    x, y = anchor
    cells = {(nx, y) for nx in range(x - arm_length, x + arm_length + 1)}
    cells.update((x, ny) for ny in range(y - arm_length, y + arm_length + 1))
    return cells


def clip_to_canvas(positions: Iterable[Position], width: int, height: int) -> Set[Position]:
    return {(x, y) for x, y in positions if 0 <= x < width and 0 <= y < height}


def layout_seeds(
    layout: str,
    width: int,
    height: int,
    arm_length: int = DEFAULT_ARM_LENGTH,
) -> Set[Position]:
    seeds: Set[Position] = set()
    for anchor in layout_anchors(layout, width, height):
        seeds |= plus_shape(anchor, arm_length)
    return clip_to_canvas(seeds, width, height)


def load_mask(source: Union[str, Path, np.ndarray]) -> np.ndarray:
    """Grayscale ``(height, width)`` uint8 mask from a path or an array."""
    if isinstance(source, np.ndarray):
        arr = source
        if arr.dtype == bool:
            arr = arr.astype(np.uint8) * 255
        if arr.ndim == 3:
            return np.asarray(Image.fromarray(arr.astype(np.uint8)).convert("L"))
        return arr.astype(np.uint8)
    path = Path(source)
    if not path.is_file():
        raise ConfigurationError(f"Seed mask not found: {path}")
    try:
        with Image.open(path) as img:
            return np.asarray(img.convert("L"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read seed mask {path}: {exc}") from exc


def mask_seeds(
    mask: np.ndarray,
    threshold: int = DEFAULT_MASK_THRESHOLD,
) -> Tuple[Set[Position], Tuple[int, int]]:
    """Every pixel brighter than ``threshold`` becomes a seed.

    Returns the seeds and the ``(width, height)`` the canvas must take.
    """
    if mask.ndim != 2 or mask.size == 0:
        raise ConfigurationError(f"Seed mask must be a non-empty 2D image, got shape {mask.shape}")
    ys, xs = np.nonzero(mask > threshold)
    seeds = {(int(x), int(y)) for x, y in zip(xs, ys)}
    height, width = mask.shape
    logger.info("Mask %dx%d yields %d seed cells (threshold=%d)", width, height, len(seeds), threshold)
    return seeds, (width, height)


def require_seeds(seeds: Sequence[Position]) -> None:
    if not seeds:
        raise ConfigurationError("No seed positions inside the canvas; nothing can grow")
