"""Public interface for the all-colors growth mosaic generator."""

from .canvas import Canvas, CanvasWriteError
from .config import ConfigurationError, GrowthConfig
from .engine import (
    EngineState,
    FrontierInvariantError,
    Outcome,
    PlacementEngine,
    PlacementResult,
)
from .frontier import FrontierSet, free_neighbours
from .palette import PaletteQueue, generate_palette
from .runner import build_engine, grow
from .scorer import CachedNeighbourScorer, NeighbourScorer
from .snapshot import SnapshotWriter, embellish

__all__ = [
    "CachedNeighbourScorer",
    "Canvas",
    "CanvasWriteError",
    "ConfigurationError",
    "EngineState",
    "FrontierInvariantError",
    "FrontierSet",
    "GrowthConfig",
    "NeighbourScorer",
    "Outcome",
    "PaletteQueue",
    "PlacementEngine",
    "PlacementResult",
    "SnapshotWriter",
    "build_engine",
    "embellish",
    "free_neighbours",
    "generate_palette",
    "grow",
]
