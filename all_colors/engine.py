"""Greedy frontier-growth placement engine.

Each step pops one color, scores every frontier cell against it, commits the
color to the cheapest cell and grows the frontier around that cell.  The loop
ends when the palette is used up (``Outcome.COMPLETED``) or when no growable
cell remains (``Outcome.FRONTIER_EXHAUSTED``).  Bookkeeping bugs raise
``FrontierInvariantError`` and are never reported as an outcome.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence

import numpy as np

from .canvas import Canvas
from .config import Color, Position
from .frontier import FrontierSet
from .palette import PaletteQueue
from .scorer import NeighbourScorer

logger = logging.getLogger(__name__)

StepObserver = Callable[["PlacementEngine", Position, Color], None]


class FrontierInvariantError(RuntimeError):
    """Frontier bookkeeping is inconsistent with the canvas."""


class EngineState(str, Enum):
    GROWING = "growing"
    DONE = "done"


class Outcome(str, Enum):
    COMPLETED = "completed"                    # every color placed
    FRONTIER_EXHAUSTED = "frontier_exhausted"  # growth front collapsed first


@dataclass
class PlacementResult:
    outcome: Outcome
    placed: int
    colors_left: int
    frontier_size: int

    @property
    def completed(self) -> bool:
        return self.outcome is Outcome.COMPLETED

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.value,
            "placed": int(self.placed),
            "colors_left": int(self.colors_left),
            "frontier_size": int(self.frontier_size),
        }


class PlacementEngine:
    """Owns the palette, frontier, scorer and RNG of one run.

    The canvas is the only state shared with the outside; observers see it
    between steps, never mid-commit.
    """

    def __init__(
        self,
        canvas: Canvas,
        palette: PaletteQueue,
        frontier: FrontierSet,
        scorer: NeighbourScorer,
        rng: Optional[np.random.Generator] = None,
        check_invariants: bool = False,
        observers: Sequence[StepObserver] = (),
    ):
        self.canvas = canvas
        self.palette = palette
        self.frontier = frontier
        self.scorer = scorer
        self.radius = scorer.radius
        self.rng = rng if rng is not None else np.random.default_rng(0)
        self.check_invariants = check_invariants
        self.observers: List[StepObserver] = list(observers)
        self.placed = 0
        self.scorer.bind(canvas)

    @property
    def state(self) -> EngineState:
        if self.palette.empty or not self.frontier:
            return EngineState.DONE
        return EngineState.GROWING

    def add_observer(self, observer: StepObserver) -> None:
        self.observers.append(observer)

    def select_position(self, color: Color) -> Position:
        """Cheapest frontier cell for ``color``; ties go to a random candidate.

        Candidates are shuffled with the engine RNG before a first-minimum
        scan, so every tied cell is equally likely and runs are reproducible.
        """
        candidates = self.frontier.as_array()
        scores = self.scorer.score_many(self.canvas, candidates, color)
        order = self.rng.permutation(len(candidates))
        best = order[int(np.argmin(scores[order]))]
        x, y = candidates[best]
        return int(x), int(y)

    def commit(self, pos: Position, color: Color) -> None:
        try:
            self.frontier.remove(pos)
        except KeyError:
            raise FrontierInvariantError(f"Selected position {pos} is not in the frontier") from None
        self.canvas.set(pos, color)
        self.scorer.observe(pos, color)
        self.frontier.expand(self.canvas, pos, self.radius)
        self.placed += 1
        if self.check_invariants:
            self.verify_frontier()

    def step(self) -> Optional[Position]:
        """Place one color.  Returns the position, or None once done."""
        if self.state is EngineState.DONE:
            return None
        color = self.palette.pop()
        pos = self.select_position(color)
        self.commit(pos, color)
        for observer in self.observers:
            observer(self, pos, color)
        return pos

    def run(self) -> PlacementResult:
        logger.info(
            "Placing %d colors on %dx%d canvas from %d frontier cells",
            len(self.palette), self.canvas.width, self.canvas.height, len(self.frontier),
        )
        while self.step() is not None:
            pass
        return self.result()

    def result(self) -> PlacementResult:
        if self.state is EngineState.GROWING:
            raise RuntimeError("Engine is still growing")
        colors_left = len(self.palette)
        if colors_left == 0:
            outcome = Outcome.COMPLETED
            logger.info("All %d colors placed", self.placed)
        else:
            outcome = Outcome.FRONTIER_EXHAUSTED
            logger.warning(
                "Frontier exhausted after %d placements; %d colors left unplaced",
                self.placed, colors_left,
            )
        return PlacementResult(
            outcome=outcome,
            placed=self.placed,
            colors_left=colors_left,
            frontier_size=len(self.frontier),
        )

    def verify_frontier(self) -> None:
        """Every frontier cell must be in bounds and still empty."""
        for pos in self.frontier:
            if not self.canvas.in_bounds(pos) or not self.canvas.is_empty(pos):
                raise FrontierInvariantError(f"Frontier holds non-free position {pos}")
