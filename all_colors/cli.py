"""
Command line interface for the all-colors growth mosaic.

Every color of a quantized palette is placed once, next to the colors it
resembles most, starting from a seed layout or a mask image.  Preview frames
are written while the mosaic grows.

Usage examples
--------------

Grow from two seeds on a small canvas and save a frame every 256 colors::

    python -m all_colors.cli --layout 2 --width 256 --height 128 \\
        --levels 31 31 31 --save-every 256 -o output

Grow inside the bright area of a mask, writing PPM frames::

    python -m all_colors.cli --mask shape.png --format ppm -o output
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import (
    DEFAULT_ARM_LENGTH,
    DEFAULT_HEIGHT,
    DEFAULT_LEVELS,
    DEFAULT_MASK_THRESHOLD,
    DEFAULT_RADIUS,
    DEFAULT_SNAPSHOT_EVERY,
    DEFAULT_WIDTH,
    SEED_LAYOUTS,
    ConfigurationError,
    GrowthConfig,
    ImageFormat,
    ScorerKind,
    SortKey,
)
from .color import COLOR_METRICS
from .engine import Outcome
from .runner import build_engine
from .snapshot import SnapshotWriter

logger = logging.getLogger("all_colors")

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_INCOMPLETE = 2


def _setup_logging(debug: bool = False):
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _parse_point(text: str):
    try:
        x, y = (int(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected X,Y integers, got {text!r}") from None
    return x, y


def _parse_color(text: str):
    try:
        parts = tuple(int(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected B,G,R integers, got {text!r}") from None
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"Expected three channels, got {text!r}")
    return parts


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Place every palette color once, growing a color mosaic from seeds.",
    )
    seeds = parser.add_argument_group("seeding")
    seeds.add_argument("--layout", choices=sorted(SEED_LAYOUTS), default="1",
                       help="Named seed layout: number of symmetric seed crosses (default: 1).")
    seeds.add_argument("--mask", type=Path, default=None,
                       help="Monochrome image; bright pixels become seeds and set the canvas size.")
    seeds.add_argument("--mask-threshold", type=int, default=DEFAULT_MASK_THRESHOLD,
                       help="Brightness above which a mask pixel is a seed.")
    seeds.add_argument("--arm-length", type=int, default=DEFAULT_ARM_LENGTH,
                       help="Arm length of each seed cross.")
    seeds.add_argument("--seed-point", type=_parse_point, action="append", default=[],
                       metavar="X,Y", help="Extra seed cell (repeatable).")

    canvas = parser.add_argument_group("canvas and palette")
    canvas.add_argument("--width", type=int, default=DEFAULT_WIDTH)
    canvas.add_argument("--height", type=int, default=DEFAULT_HEIGHT)
    canvas.add_argument("--levels", type=int, nargs=3, default=list(DEFAULT_LEVELS),
                        metavar=("B", "G", "R"),
                        help="Quantization levels per channel (default: 63 127 127).")
    canvas.add_argument("--sentinel", type=_parse_color, default=None, metavar="B,G,R",
                        help="Color marking empty cells (default: 0,0,0).")
    canvas.add_argument("--sort-key", choices=[k.value for k in SortKey], default=SortKey.HUE.value)
    canvas.add_argument("--descending", action="store_true",
                        help="Reverse the palette sort direction.")

    placement = parser.add_argument_group("placement")
    placement.add_argument("--seed", type=int, default=0, help="RNG seed for the palette shuffle.")
    placement.add_argument("--tie-break-seed", type=int, default=None,
                           help="Separate RNG seed for tie-breaking (default: share --seed stream).")
    placement.add_argument("--radius", type=int, default=DEFAULT_RADIUS,
                           help="Neighbourhood radius for scoring and frontier growth.")
    placement.add_argument("--metric", choices=sorted(COLOR_METRICS), default="euclidean")
    placement.add_argument("--scorer", choices=[k.value for k in ScorerKind], default=ScorerKind.SCAN.value,
                           help="Neighbour aggregation strategy.")
    placement.add_argument("--check-invariants", action="store_true",
                           help="Verify the frontier after every placement (slow).")
    placement.add_argument("--strict", action="store_true",
                           help="Exit with status 2 when colors are left unplaced.")

    output = parser.add_argument_group("output")
    output.add_argument("-o", "--output-dir", type=Path, default=Path("output"),
                        help="Directory for snapshot frames (default: ./output).")
    output.add_argument("--save-every", type=int, default=DEFAULT_SNAPSHOT_EVERY,
                        help="Write a frame every N placements.")
    output.add_argument("--format", choices=[f.value for f in ImageFormat], default=ImageFormat.PNG.value)
    output.add_argument("--no-embellish", action="store_true",
                        help="Write raw frames without the preview smoothing.")
    output.add_argument("--debug", action="store_true", help="Verbose logging.")
    return parser


def config_from_args(args: argparse.Namespace) -> GrowthConfig:
    config = GrowthConfig(
        width=args.width,
        height=args.height,
        levels=tuple(args.levels),
        seed=args.seed,
        sort_key=SortKey(args.sort_key),
        sort_descending=args.descending,
        tie_break_seed=args.tie_break_seed,
        radius=args.radius,
        metric=args.metric,
        scorer=ScorerKind(args.scorer),
        check_invariants=args.check_invariants,
        layout=None if args.mask else args.layout,
        arm_length=args.arm_length,
        mask_path=args.mask,
        mask_threshold=args.mask_threshold,
        extra_seeds=list(args.seed_point),
    )
    if args.sentinel is not None:
        config.sentinel = args.sentinel
    return config


def _write_summary(path: Path, config: GrowthConfig, result, frames: List[Path]) -> None:
    summary = {
        "result": result.to_dict(),
        "width": config.width,
        "height": config.height,
        "levels": list(config.levels),
        "seed": config.seed,
        "radius": config.radius,
        "metric": config.metric,
        "frames": [p.name for p in frames],
    }
    with open(path, "w") as f:
        json.dump(summary, f, indent=2)
    logger.info("Run summary → %s", path)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.debug)

    config = config_from_args(args)
    try:
        writer = SnapshotWriter(
            args.output_dir,
            every=args.save_every,
            use_embellish=not args.no_embellish,
            image_format=ImageFormat(args.format),
        )
        engine = build_engine(config, observers=[writer])
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return EXIT_CONFIG_ERROR

    config.width, config.height = engine.canvas.size
    result = engine.run()
    writer.finalize(engine)

    args.output_dir.mkdir(parents=True, exist_ok=True)
    _write_summary(args.output_dir / "run.json", config, result, writer.written)

    if result.outcome is Outcome.FRONTIER_EXHAUSTED and args.strict:
        return EXIT_INCOMPLETE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
