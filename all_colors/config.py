"""Run configuration: defaults, seed layouts, and the ``GrowthConfig`` dataclass."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .color import COLOR_METRICS

Color = Tuple[int, int, int]
Position = Tuple[int, int]


# ---------------------------------------------------------------------------
# Canvas defaults
# ---------------------------------------------------------------------------
DEFAULT_WIDTH = 1920
DEFAULT_HEIGHT = 1080

# Unfilled marker.  Palette channel values start at lattice index 1, so the
# default never collides with a real color.
SENTINEL_COLOR: Color = (0, 0, 0)

# Lattice densities per channel in BGR order (channel step 4, 2, 2).
DEFAULT_LEVELS: Tuple[int, int, int] = (63, 127, 127)

DEFAULT_RADIUS = 1
DEFAULT_ARM_LENGTH = 5
DEFAULT_MASK_THRESHOLD = 127
DEFAULT_SNAPSHOT_EVERY = 512

# Filler for preview cells whose blended color would read as unfilled.
PREVIEW_GRAY: Color = (127, 127, 127)


# ---------------------------------------------------------------------------
# Named seed layouts (fractions of canvas width / height)
# ---------------------------------------------------------------------------
SEED_LAYOUTS: Dict[str, List[Tuple[float, float]]] = {
    "1": [(0.5, 0.5)],
    "2": [(0.33, 0.5), (0.67, 0.5)],
    "3": [(0.33, 0.40), (0.50, 0.69), (0.67, 0.40)],
    "4": [(0.33, 0.36), (0.67, 0.36), (0.33, 0.64), (0.67, 0.64)],
}


class ConfigurationError(ValueError):
    """Raised for settings that make a run impossible before it starts."""


class SortKey(str, Enum):
    HUE = "hue"
    SATURATION = "saturation"
    VALUE = "value"


class ScorerKind(str, Enum):
    SCAN = "scan"        # rescans neighbours for every score
    CACHED = "cached"    # keeps per-cell neighbour colours up to date


class ImageFormat(str, Enum):
    PNG = "png"
    PPM = "ppm"


@dataclass
class GrowthConfig:
    """Everything needed to reproduce a run."""
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    sentinel: Color = SENTINEL_COLOR

    # Palette
    levels: Tuple[int, int, int] = DEFAULT_LEVELS
    seed: int = 0
    sort_key: SortKey = SortKey.HUE
    sort_descending: bool = False

    # Placement
    tie_break_seed: Optional[int] = None   # None: share the palette RNG stream
    radius: int = DEFAULT_RADIUS
    metric: str = "euclidean"
    scorer: ScorerKind = ScorerKind.SCAN
    check_invariants: bool = False

    # Seeding
    layout: Optional[str] = "1"      # None: seeds come from extra_seeds or the mask
    arm_length: int = DEFAULT_ARM_LENGTH
    mask_path: Optional[Path] = None
    mask_threshold: int = DEFAULT_MASK_THRESHOLD

    extra_seeds: List[Position] = field(default_factory=list)

    def validate(self) -> "GrowthConfig":
        if self.mask_path is None and (self.width <= 0 or self.height <= 0):
            raise ConfigurationError(
                f"Canvas must have a positive area, got {self.width}x{self.height}"
            )
        if self.radius < 1:
            raise ConfigurationError(f"Neighbourhood radius must be >= 1, got {self.radius}")
        if len(self.levels) != 3 or any(level < 1 or level > 255 for level in self.levels):
            raise ConfigurationError(f"Levels must be three values in 1..255, got {self.levels}")
        if len(self.sentinel) != 3 or any(not 0 <= c <= 255 for c in self.sentinel):
            raise ConfigurationError(f"Sentinel must be an 8-bit BGR triple, got {self.sentinel}")
        if self.metric not in COLOR_METRICS:
            raise ConfigurationError(
                f"Unknown color metric {self.metric!r}; choose from {sorted(COLOR_METRICS)}"
            )
        if self.arm_length < 0:
            raise ConfigurationError(f"Arm length must be >= 0, got {self.arm_length}")
        if self.layout is not None and self.layout not in SEED_LAYOUTS:
            raise ConfigurationError(
                f"Unknown seed layout {self.layout!r}; choose from {sorted(SEED_LAYOUTS)}"
            )
        if not 0 <= self.mask_threshold <= 255:
            raise ConfigurationError(f"Mask threshold must be in 0..255, got {self.mask_threshold}")
        # Coerce plain strings coming from callers that bypass the CLI.
        try:
            self.sort_key = SortKey(self.sort_key)
        except ValueError:
            raise ConfigurationError(
                f"Unknown sort key {self.sort_key!r}; choose from {[k.value for k in SortKey]}"
            ) from None
        try:
            self.scorer = ScorerKind(self.scorer)
        except ValueError:
            raise ConfigurationError(
                f"Unknown scorer {self.scorer!r}; choose from {[k.value for k in ScorerKind]}"
            ) from None
        return self
