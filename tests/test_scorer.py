"""Tests for position scoring."""

import numpy as np
import pytest

from all_colors.canvas import Canvas
from all_colors.scorer import CachedNeighbourScorer, NeighbourScorer, make_scorer


def _random_partial_canvas(width: int = 12, height: int = 9, fill: float = 0.4, seed: int = 7) -> Canvas:
    """Canvas with roughly ``fill`` of its cells set to random non-sentinel colors."""
    rng = np.random.RandomState(seed)
    canvas = Canvas(width, height)
    for y in range(height):
        for x in range(width):
            if rng.rand() < fill:
                canvas.set((x, y), tuple(rng.randint(1, 256, 3)))
    return canvas


def _empty_positions(canvas: Canvas) -> np.ndarray:
    ys, xs = np.nonzero(~canvas.filled_mask())
    return np.stack([xs, ys], axis=-1).astype(np.int64)


class TestNeighbourScorer:
    def test_no_filled_neighbours_scores_zero(self):
        canvas = Canvas(3, 3)
        assert NeighbourScorer().score(canvas, (1, 1), (200, 10, 10)) == 0.0

    def test_single_neighbour(self):
        canvas = Canvas(3, 3)
        canvas.set((0, 0), (10, 20, 30))
        assert NeighbourScorer().score(canvas, (1, 1), (10, 20, 34)) == pytest.approx(4.0)

    def test_divisor_is_squared(self):
        canvas = Canvas(3, 3)
        canvas.set((0, 0), (10, 10, 10))
        canvas.set((2, 2), (10, 10, 13))
        # (0 + 3) / 2**2
        assert NeighbourScorer().score(canvas, (1, 1), (10, 10, 10)) == pytest.approx(0.75)

    def test_compact_beats_filament(self):
        canvas = Canvas(4, 3)
        for pos in [(0, 0), (1, 0), (2, 0)]:
            canvas.set(pos, (100, 100, 100))
        scorer = NeighbourScorer()
        color = (110, 100, 100)
        # (1, 1) touches three cells, (3, 1) touches one
        assert scorer.score(canvas, (1, 1), color) < scorer.score(canvas, (3, 1), color)

    def test_manhattan_metric(self):
        canvas = Canvas(3, 3)
        canvas.set((0, 0), (10, 10, 10))
        scorer = NeighbourScorer(metric="manhattan")
        assert scorer.score(canvas, (1, 1), (13, 14, 10)) == pytest.approx(7.0)

    def test_radius_reaches_further(self):
        canvas = Canvas(5, 5)
        canvas.set((0, 0), (10, 10, 10))
        color = (10, 10, 15)
        assert NeighbourScorer(radius=1).score(canvas, (2, 2), color) == 0.0
        assert NeighbourScorer(radius=2).score(canvas, (2, 2), color) == pytest.approx(5.0)

    def test_edges_ignore_out_of_bounds(self):
        canvas = Canvas(2, 2)
        canvas.set((1, 1), (50, 50, 50))
        assert NeighbourScorer().score(canvas, (0, 0), (50, 50, 52)) == pytest.approx(2.0)

    def test_scores_non_negative(self):
        canvas = _random_partial_canvas()
        positions = _empty_positions(canvas)
        scores = NeighbourScorer().score_many(canvas, positions, (128, 64, 32))
        assert scores.shape == (len(positions),)
        assert np.all(scores >= 0)

    def test_empty_batch(self):
        scores = NeighbourScorer().score_many(Canvas(2, 2), np.empty((0, 2), dtype=np.int64), (1, 1, 1))
        assert scores.shape == (0,)


class TestCachedNeighbourScorer:
    @pytest.mark.parametrize("radius", [1, 2])
    def test_matches_scan_after_bind(self, radius):
        canvas = _random_partial_canvas()
        positions = _empty_positions(canvas)
        scan = NeighbourScorer(radius=radius)
        cached = CachedNeighbourScorer(radius=radius)
        cached.bind(canvas)
        color = (90, 180, 30)
        np.testing.assert_allclose(
            cached.score_many(canvas, positions, color),
            scan.score_many(canvas, positions, color),
        )

    def test_tracks_incremental_commits(self):
        canvas = _random_partial_canvas(fill=0.2)
        cached = CachedNeighbourScorer()
        cached.bind(canvas)
        rng = np.random.RandomState(3)
        for pos in [tuple(p) for p in _empty_positions(canvas)[::3].tolist()]:
            color = tuple(rng.randint(1, 256, 3))
            canvas.set(pos, color)
            cached.observe(pos, color)
        positions = _empty_positions(canvas)
        color = (1, 2, 250)
        np.testing.assert_allclose(
            cached.score_many(canvas, positions, color),
            NeighbourScorer().score_many(canvas, positions, color),
        )

    @pytest.mark.parametrize("radius", [3, 4, 6])
    def test_radius_larger_than_canvas(self, radius):
        canvas = _random_partial_canvas(width=3, height=3, fill=0.5, seed=11)
        positions = _empty_positions(canvas)
        cached = CachedNeighbourScorer(radius=radius)
        cached.bind(canvas)
        color = (30, 200, 90)
        np.testing.assert_allclose(
            cached.score_many(canvas, positions, color),
            NeighbourScorer(radius=radius).score_many(canvas, positions, color),
        )

    def test_rebinds_on_new_canvas(self):
        cached = CachedNeighbourScorer()
        cached.bind(Canvas(3, 3))
        other = Canvas(3, 3)
        other.set((0, 0), (10, 20, 30))
        assert cached.score(other, (1, 1), (10, 20, 34)) == pytest.approx(4.0)


def test_make_scorer():
    assert type(make_scorer("scan")) is NeighbourScorer
    assert type(make_scorer("cached", radius=2)) is CachedNeighbourScorer
    with pytest.raises(ValueError):
        make_scorer("psychic")
