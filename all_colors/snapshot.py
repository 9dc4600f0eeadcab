"""Preview snapshots of a growing canvas.

Snapshots are written from a copy taken between engine steps.  The
"embellish" pass only decorates the preview: empty cells get a blurred hint of
their surroundings, committed cells are left untouched, and nothing flows
back into the engine's canvas.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

import cv2
import numpy as np
from PIL import Image

from .config import DEFAULT_SNAPSHOT_EVERY, PREVIEW_GRAY, SENTINEL_COLOR, ConfigurationError, ImageFormat

logger = logging.getLogger(__name__)

_KERNEL = np.ones((3, 3), dtype=np.uint8)


def embellish(
    pixels: np.ndarray,
    sentinel: Sequence[int] = SENTINEL_COLOR,
    opacity: float = 0.5,
) -> np.ndarray:
    """Fill empty cells with a dilated, median-blurred blend for previews.

    Args:
        pixels: ``(H, W, 3)`` uint8 BGR grid; not modified.
        sentinel: Color marking empty cells.
        opacity: Weight of the filtered color in the blend.

    Returns:
        A new uint8 array.  Cells whose blend equals the sentinel become gray.
    """
    sentinel_arr = np.asarray(sentinel, dtype=np.uint8)
    filtered = cv2.medianBlur(cv2.dilate(pixels, _KERNEL), 3)
    result = pixels.copy()
    empty = np.all(pixels == sentinel_arr, axis=-1)
    if not np.any(empty):
        return result
    blend = (
        pixels[empty].astype(np.float64) * (1.0 - opacity)
        + filtered[empty].astype(np.float64) * opacity
    ).astype(np.uint8)
    still_empty = np.all(blend == sentinel_arr, axis=-1)
    blend[still_empty] = PREVIEW_GRAY
    result[empty] = blend
    return result


def save_image(pixels: np.ndarray, path: Path) -> Path:
    """Write a BGR grid as an RGB image; the suffix picks the format."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(np.ascontiguousarray(pixels[:, :, ::-1])).save(path)
    return path


class SnapshotWriter:
    """Step observer that writes numbered frames every ``every`` placements.

    A frame is due whenever the number of colors left is a multiple of
    ``every``, which includes the final frame of a completed run.  Write
    failures are logged and never interrupt placement.
    """

    def __init__(
        self,
        output_dir: Path,
        every: int = DEFAULT_SNAPSHOT_EVERY,
        use_embellish: bool = True,
        image_format: ImageFormat = ImageFormat.PNG,
        prefix: str = "image",
    ):
        if every <= 0:
            raise ConfigurationError(f"Snapshot interval must be positive, got {every}")
        self.output_dir = Path(output_dir)
        self.every = every
        self.use_embellish = use_embellish
        self.image_format = ImageFormat(image_format)
        self.prefix = prefix
        self.frames = 0
        self.written: list = []
        self._last_placed: Optional[int] = None

    def expected_frames(self, total_colors: int) -> int:
        return total_colors // self.every

    def __call__(self, engine, pos, color) -> None:
        colors_left = len(engine.palette)
        if colors_left % self.every != 0:
            return
        self.frames += 1
        logger.info(
            "image %d/%d colors_left=%d border_positions=%d",
            self.frames, self.expected_frames(engine.palette.total),
            colors_left, len(engine.frontier),
        )
        self.write(engine.canvas.snapshot(), engine.canvas.sentinel)
        self._last_placed = engine.placed

    def finalize(self, engine) -> Optional[Path]:
        """Write the final state unless the last step already produced a frame."""
        if self._last_placed == engine.placed:
            return None
        self.frames += 1
        return self.write(engine.canvas.snapshot(), engine.canvas.sentinel)

    def write(self, pixels: np.ndarray, sentinel: Sequence[int]) -> Optional[Path]:
        if self.use_embellish:
            pixels = embellish(pixels, sentinel)
        path = self.output_dir / f"{self.prefix}{self.frames:04d}.{self.image_format.value}"
        try:
            save_image(pixels, path)
        except OSError as exc:
            logger.warning("Failed to write snapshot %s: %s", path, exc)
            return None
        self.written.append(path)
        logger.debug("Wrote snapshot %s", path)
        return path
