"""Wire a ``GrowthConfig`` into a ready-to-run placement engine."""

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from .canvas import Canvas
from .config import GrowthConfig
from .engine import PlacementEngine, PlacementResult, StepObserver
from .frontier import FrontierSet
from .palette import PaletteQueue, generate_palette
from .scorer import make_scorer
from .seeding import layout_seeds, load_mask, mask_seeds, require_seeds

logger = logging.getLogger(__name__)


def build_engine(
    config: GrowthConfig,
    observers: Sequence[StepObserver] = (),
    mask: Optional[np.ndarray] = None,
) -> PlacementEngine:
    """Validate ``config`` and assemble canvas, palette, frontier and scorer.

    A mask (array or ``config.mask_path``) fixes the canvas size and replaces
    the named layout.  Raises ``ConfigurationError`` before any placement
    when the run cannot start.
    """
    config.validate()

    seeds = set()
    width, height = config.width, config.height
    if mask is not None or config.mask_path is not None:
        mask_arr = load_mask(mask if mask is not None else config.mask_path)
        seeds, (width, height) = mask_seeds(mask_arr, config.mask_threshold)
    elif config.layout is not None:
        seeds = layout_seeds(config.layout, width, height, config.arm_length)

    canvas = Canvas(width, height, config.sentinel)
    frontier = FrontierSet()
    frontier.seed(canvas, seeds)
    frontier.seed(canvas, config.extra_seeds)
    require_seeds(list(frontier))

    rng = np.random.default_rng(config.seed)
    colors = generate_palette(
        config.levels, rng, config.sentinel, config.sort_key, config.sort_descending,
    )
    if len(colors) > canvas.area:
        logger.warning(
            "Palette has %d colors but the canvas only %d cells; the run cannot complete",
            len(colors), canvas.area,
        )
    tie_rng = rng if config.tie_break_seed is None else np.random.default_rng(config.tie_break_seed)

    scorer = make_scorer(config.scorer, config.radius, config.metric)
    logger.debug("Using %r with %d seed cells", scorer, len(frontier))
    return PlacementEngine(
        canvas,
        PaletteQueue(colors),
        frontier,
        scorer,
        rng=tie_rng,
        check_invariants=config.check_invariants,
        observers=observers,
    )


def grow(
    config: GrowthConfig,
    observers: Sequence[StepObserver] = (),
    mask: Optional[np.ndarray] = None,
) -> Tuple[Canvas, PlacementResult]:
    """Run a full placement and return the canvas with its outcome."""
    engine = build_engine(config, observers, mask)
    result = engine.run()
    return engine.canvas, result
