"""Position scoring: how well a color fits an empty cell, lower is better.

For each filled neighbour within the radius the color distance is summed,
then divided by the squared neighbour count::

    score = total_distance / max(count, 1) ** 2

Squaring the divisor favours cells surrounded by many filled neighbours over
cells touching a single one.  That suppresses thin, coral-like filaments and
keeps the growth front compact.  A cell with no filled neighbours scores 0.

Scoring is read-only and consumes no randomness, so a whole frontier is
scored in one vectorised numpy pass.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from .canvas import Canvas
from .color import get_metric
from .config import Position
from .frontier import neighbour_offsets

logger = logging.getLogger(__name__)


def _normalise(total: np.ndarray, count: np.ndarray) -> np.ndarray:
    divisor = np.maximum(count, 1).astype(np.float64)
    return total / (divisor * divisor)


class NeighbourScorer:
    """Rescans the neighbourhood of every candidate on each call."""

    def __init__(self, radius: int = 1, metric: str = "euclidean"):
        self.radius = radius
        self.metric_name = metric
        self.metric = get_metric(metric)
        self.offsets = neighbour_offsets(radius)

    def bind(self, canvas: Canvas) -> None:
        """Prepare for scoring against ``canvas``; nothing to do when scanning."""

    def observe(self, pos: Position, color: Sequence[int]) -> None:
        """Called by the engine after each commit."""

    def score(self, canvas: Canvas, pos: Position, color: Sequence[int]) -> float:
        return float(self.score_many(canvas, np.array([pos], dtype=np.int64), color)[0])

    def score_many(self, canvas: Canvas, positions: np.ndarray, color: Sequence[int]) -> np.ndarray:
        """Scores for an ``(n, 2)`` array of ``(x, y)`` positions."""
        if len(positions) == 0:
            return np.empty(0, dtype=np.float64)
        xs = positions[:, 0:1] + self.offsets[:, 0]
        ys = positions[:, 1:2] + self.offsets[:, 1]
        inside = (xs >= 0) & (xs < canvas.width) & (ys >= 0) & (ys < canvas.height)
        neighbours = canvas.pixels[
            np.clip(ys, 0, canvas.height - 1),
            np.clip(xs, 0, canvas.width - 1),
        ]
        sentinel = np.asarray(canvas.sentinel, dtype=np.uint8)
        filled = inside & np.any(neighbours != sentinel, axis=-1)
        return self._aggregate(neighbours, filled, color)

    def _aggregate(self, neighbours: np.ndarray, filled: np.ndarray, color: Sequence[int]) -> np.ndarray:
        delta = neighbours.astype(np.float64) - np.asarray(color, dtype=np.float64)
        distances = np.where(filled, self.metric(delta), 0.0)
        return _normalise(distances.sum(axis=1), filled.sum(axis=1))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(radius={self.radius}, metric={self.metric_name!r})"


class CachedNeighbourScorer(NeighbourScorer):
    """Keeps each cell's filled-neighbour colors up to date as cells are committed.

    Slot ``j`` of cell ``(x, y)`` mirrors the canvas at ``(x, y) + offsets[j]``,
    so scoring reads one contiguous block per candidate instead of doing
    bounds checks and sentinel comparisons.  Scores match the scanning scorer.
    """

    def __init__(self, radius: int = 1, metric: str = "euclidean"):
        super().__init__(radius, metric)
        self._canvas: Optional[Canvas] = None
        self._colors: Optional[np.ndarray] = None
        self._filled: Optional[np.ndarray] = None

    def bind(self, canvas: Canvas) -> None:
        k = len(self.offsets)
        h, w = canvas.height, canvas.width
        self._canvas = canvas
        self._colors = np.zeros((h, w, k, 3), dtype=np.uint8)
        self._filled = np.zeros((h, w, k), dtype=bool)
        filled = canvas.filled_mask()
        for j, (dx, dy) in enumerate(self.offsets):
            if abs(dx) >= w or abs(dy) >= h:
                continue  # no cell has this neighbour inside the canvas
            dst_x = slice(max(0, -dx), w - max(0, dx))
            src_x = slice(max(0, dx), w - max(0, -dx))
            dst_y = slice(max(0, -dy), h - max(0, dy))
            src_y = slice(max(0, dy), h - max(0, -dy))
            self._colors[dst_y, dst_x, j] = canvas.pixels[src_y, src_x]
            self._filled[dst_y, dst_x, j] = filled[src_y, src_x]
        logger.debug("Neighbour cache bound to %dx%d canvas (%d slots)", w, h, k)

    def observe(self, pos: Position, color: Sequence[int]) -> None:
        if self._canvas is None:
            return
        canvas = self._canvas
        qx = pos[0] - self.offsets[:, 0]
        qy = pos[1] - self.offsets[:, 1]
        valid = (qx >= 0) & (qx < canvas.width) & (qy >= 0) & (qy < canvas.height)
        slots = np.nonzero(valid)[0]
        self._colors[qy[valid], qx[valid], slots] = np.asarray(color, dtype=np.uint8)
        self._filled[qy[valid], qx[valid], slots] = True

    def score_many(self, canvas: Canvas, positions: np.ndarray, color: Sequence[int]) -> np.ndarray:
        if canvas is not self._canvas:
            self.bind(canvas)
        if len(positions) == 0:
            return np.empty(0, dtype=np.float64)
        xs, ys = positions[:, 0], positions[:, 1]
        return self._aggregate(self._colors[ys, xs], self._filled[ys, xs], color)


def make_scorer(kind: str = "scan", radius: int = 1, metric: str = "euclidean") -> NeighbourScorer:
    kind = getattr(kind, "value", kind)
    if kind == "scan":
        return NeighbourScorer(radius, metric)
    if kind == "cached":
        return CachedNeighbourScorer(radius, metric)
    raise ValueError(f"Unknown scorer kind: {kind}")
