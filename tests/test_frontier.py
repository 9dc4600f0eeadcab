"""Tests for the canvas, frontier bookkeeping and seed layouts."""

import numpy as np
import pytest

from all_colors.canvas import Canvas, CanvasWriteError
from all_colors.config import ConfigurationError
from all_colors.frontier import FrontierSet, free_neighbours, neighbour_offsets
from all_colors.seeding import (
    layout_anchors,
    layout_seeds,
    load_mask,
    mask_seeds,
    plus_shape,
    require_seeds,
)


def _filled_canvas(width: int, height: int, color=(50, 60, 70)) -> Canvas:
    canvas = Canvas(width, height)
    for y in range(height):
        for x in range(width):
            canvas.set((x, y), color)
    return canvas


# ---------------------------------------------------------------------------
# Tests: canvas
# ---------------------------------------------------------------------------


class TestCanvas:
    def test_starts_empty(self):
        canvas = Canvas(4, 3)
        assert canvas.size == (4, 3)
        assert canvas.pixels.shape == (3, 4, 3)
        assert canvas.filled_count() == 0
        assert canvas.is_empty((3, 2))

    def test_set_and_get(self):
        canvas = Canvas(4, 3)
        canvas.set((3, 1), (10, 20, 30))
        assert canvas.get((3, 1)) == (10, 20, 30)
        assert tuple(canvas.pixels[1, 3]) == (10, 20, 30)
        assert canvas.filled_count() == 1

    @pytest.mark.parametrize("width,height", [(0, 5), (5, 0), (-1, 3)])
    def test_zero_area_rejected(self, width, height):
        with pytest.raises(ConfigurationError):
            Canvas(width, height)

    def test_never_overwritten(self):
        canvas = Canvas(2, 2)
        canvas.set((0, 0), (1, 2, 3))
        with pytest.raises(CanvasWriteError):
            canvas.set((0, 0), (4, 5, 6))
        assert canvas.get((0, 0)) == (1, 2, 3)

    def test_illegal_writes(self):
        canvas = Canvas(2, 2)
        with pytest.raises(CanvasWriteError):
            canvas.set((2, 0), (1, 1, 1))
        with pytest.raises(CanvasWriteError):
            canvas.set((0, 0), (0, 0, 0))

    def test_custom_sentinel(self):
        canvas = Canvas(2, 1, sentinel=(255, 255, 255))
        assert canvas.is_empty((0, 0))
        canvas.set((0, 0), (0, 0, 0))
        assert not canvas.is_empty((0, 0))
        assert canvas.filled_mask().tolist() == [[True, False]]

    def test_snapshot_is_a_copy(self):
        canvas = Canvas(2, 2)
        snap = canvas.snapshot()
        canvas.set((1, 1), (9, 9, 9))
        assert np.all(snap == 0)


# ---------------------------------------------------------------------------
# Tests: neighbourhood
# ---------------------------------------------------------------------------


class TestNeighbours:
    def test_moore_offsets(self):
        offsets = neighbour_offsets(1)
        assert len(offsets) == 8
        assert not np.any(np.all(offsets == 0, axis=1))

    def test_radius_two(self):
        assert len(neighbour_offsets(2)) == 24

    def test_corner_neighbours(self):
        canvas = Canvas(3, 3)
        assert free_neighbours(canvas, (0, 0)) == {(1, 0), (0, 1), (1, 1)}

    def test_centre_never_returned(self):
        canvas = Canvas(3, 3)
        assert (1, 1) not in free_neighbours(canvas, (1, 1))
        assert len(free_neighbours(canvas, (1, 1))) == 8
        assert (2, 2) not in free_neighbours(canvas, (2, 2), radius=2)

    def test_filled_cells_excluded(self):
        canvas = Canvas(3, 3)
        canvas.set((1, 0), (5, 5, 5))
        canvas.set((1, 1), (5, 5, 5))
        assert free_neighbours(canvas, (0, 0)) == {(0, 1)}


# ---------------------------------------------------------------------------
# Tests: frontier set
# ---------------------------------------------------------------------------


class TestFrontierSet:
    def test_seed_drops_invalid_positions(self):
        canvas = Canvas(3, 3)
        canvas.set((1, 1), (7, 7, 7))
        frontier = FrontierSet()
        added = frontier.seed(canvas, [(0, 0), (1, 1), (5, 0), (-1, 2), (2, 2)])
        assert added == 2
        assert set(frontier) == {(0, 0), (2, 2)}

    def test_union_deduplicates(self):
        frontier = FrontierSet([(0, 0), (1, 0)])
        frontier.union([(1, 0), (2, 0)])
        assert len(frontier) == 3
        assert frontier.contains((2, 0))
        assert (5, 5) not in frontier

    def test_remove_missing_raises(self):
        frontier = FrontierSet([(0, 0)])
        frontier.remove((0, 0))
        assert not frontier
        with pytest.raises(KeyError):
            frontier.remove((0, 0))

    def test_expand_adds_free_neighbours(self):
        canvas = Canvas(3, 3)
        canvas.set((1, 1), (9, 9, 9))
        frontier = FrontierSet()
        assert frontier.expand(canvas, (1, 1)) == 8
        assert (1, 1) not in frontier

    def test_expand_is_idempotent(self):
        canvas = Canvas(5, 5)
        canvas.set((2, 2), (9, 9, 9))
        frontier = FrontierSet()
        frontier.expand(canvas, (2, 2))
        assert frontier.expand(canvas, (2, 2)) == 0
        assert len(frontier) == 8

    def test_surrounded_position_adds_nothing(self):
        canvas = _filled_canvas(3, 3)
        frontier = FrontierSet()
        assert frontier.expand(canvas, (1, 1)) == 0
        assert len(frontier) == 0

    def test_as_array(self):
        frontier = FrontierSet([(1, 2), (3, 4)])
        arr = frontier.as_array()
        assert arr.shape == (2, 2)
        assert {tuple(row) for row in arr.tolist()} == {(1, 2), (3, 4)}
        assert FrontierSet().as_array().shape == (0, 2)


# ---------------------------------------------------------------------------
# Tests: seeding
# ---------------------------------------------------------------------------


class TestSeeding:
    def test_single_cross(self):
        seeds = layout_seeds("1", 100, 100, arm_length=5)
        assert (50, 50) in seeds
        assert (45, 50) in seeds and (50, 55) in seeds
        assert len(seeds) == 21

    def test_layout_anchors(self):
        assert layout_anchors("2", 100, 50) == [(33, 25), (67, 25)]
        assert len(layout_anchors("4", 100, 100)) == 4

    def test_cross_clipped_to_canvas(self):
        seeds = layout_seeds("1", 4, 4, arm_length=5)
        assert seeds
        assert all(0 <= x < 4 and 0 <= y < 4 for x, y in seeds)

    def test_plus_shape_zero_arm(self):
        assert plus_shape((3, 3), 0) == {(3, 3)}

    def test_unknown_layout(self):
        with pytest.raises(ConfigurationError):
            layout_anchors("7", 10, 10)

    def test_mask_seeds(self):
        mask = np.zeros((4, 6), dtype=np.uint8)
        mask[1, 2] = 255
        mask[3, 5] = 200
        mask[0, 0] = 127  # not above threshold
        seeds, size = mask_seeds(mask, threshold=127)
        assert seeds == {(2, 1), (5, 3)}
        assert size == (6, 4)

    def test_bool_mask_scaled(self):
        mask = np.zeros((3, 4), dtype=bool)
        mask[1, 2] = True
        loaded = load_mask(mask)
        assert loaded[1, 2] == 255
        seeds, _ = mask_seeds(loaded)
        assert seeds == {(2, 1)}

    def test_rgb_mask_converted(self):
        rgb = np.zeros((2, 2, 3), dtype=np.uint8)
        rgb[0, 1] = (255, 255, 255)
        assert load_mask(rgb).shape == (2, 2)

    def test_missing_mask_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_mask(tmp_path / "nope.png")

    def test_unreadable_mask_file(self, tmp_path):
        path = tmp_path / "mask.png"
        path.write_bytes(b"not an image at all")
        with pytest.raises(ConfigurationError):
            load_mask(path)

    def test_require_seeds(self):
        with pytest.raises(ConfigurationError):
            require_seeds([])
