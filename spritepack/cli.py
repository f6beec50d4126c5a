from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import List

from .cells import CellGrid
from .core import PackingConfig, SpriteSheetPacker
from .errors import SequenceError, SheetWriteError, StagingError
from .frames import trim_sequence
from .logger import DEFAULT_LOG_FILE, setup_logging
from .pipeline import convert_sequence
from .placer import pack_into_height, sort_frames
from .sequence import find_sequence


def _config_from_args(args: argparse.Namespace) -> PackingConfig:
    config = PackingConfig(
        min_height=args.min_height,
        max_height=args.max_height,
        height_step=args.height_step,
    )
    config.validate()
    return config


def _print_progress(stage: str, fraction: float) -> None:
    logging.debug(f"{stage} {fraction:.0%}")


def cli_pack(args: argparse.Namespace) -> int:
    """Pack a png sequence into a sprite sheet and metadata file."""

    logging.info("Starting pack operation")
    logging.debug(f"Args: {vars(args)}")

    try:
        config = _config_from_args(args)
    except ValueError as e:
        logging.error(f"Invalid height settings: {e}")
        print(f"Invalid height settings: {e}")
        return 1

    try:
        report = convert_sequence(
            Path(args.input),
            output=Path(args.output) if args.output else None,
            config=config,
            progress=_print_progress,
            stage_to_disk=args.stage_to_disk,
            write_log=args.write_log,
        )
    except SequenceError as e:
        logging.error(f"Error reading image sequence: {e}")
        print(f"Error reading image sequence: {e}")
        return 1
    except RuntimeError as e:
        logging.error(f"Error during packing: {e}", exc_info=True)
        print(f"Error during packing: {e}")
        return 4
    except (StagingError, SheetWriteError) as e:
        logging.error(f"Error writing output: {e}")
        print(f"Error writing output: {e}")
        return 5

    result = report.result
    print(f"Packed {len(result.placements)} frames from '{report.sequence_name}'")
    print(f"Optimal sheet size: {result.used_width}x{result.used_height} (area {result.area:,})")
    if not result.converged:
        print("Note: height limit reached before the sheet narrowed to the widest frame")
    if report.errors:
        print(f"Skipped {len(report.errors)} unreadable file(s):")
        for error in report.errors:
            print(f"  - {error}")
    print(f"Wrote sprite sheet: {report.sheet_path}")
    print(f"Wrote metadata: {report.metadata_path}")
    return 0


def cli_inspect(args: argparse.Namespace) -> int:
    """Show trimming results and the height search without writing any files."""
    try:
        config = _config_from_args(args)
        sequence_name, files = find_sequence(Path(args.input))
    except (ValueError, SequenceError) as e:
        print(f"Error: {e}")
        return 1

    frames, errors = trim_sequence(files)
    if not frames:
        print(f"No readable frames in sequence '{sequence_name}'")
        return 1

    print(f"Sequence '{sequence_name}': {len(files)} files, {len(frames)} frames")
    print("=" * 50)
    for frame in frames:
        note = "  (fully transparent)" if frame.is_placeholder else ""
        print(f"  Frame {frame.index:4d}: {frame.original_size[0]}x{frame.original_size[1]} -> "
              f"{frame.width}x{frame.height}, anchor ({frame.anchor_x}, {frame.anchor_y}){note}")
    for error in errors:
        print(f"  Skipped: {error}")

    start = time.time()
    result = SpriteSheetPacker(config).pack(frames)
    elapsed = time.time() - start

    print("\nHeight search:")
    for candidate in result.candidates:
        marker = " <- best" if candidate.height == result.used_height else ""
        print(f"  height {candidate.height:5d}: width {candidate.used_width:5d}, area {candidate.area:,}{marker}")
    print(f"\nOptimal sheet size: {result.used_width}x{result.used_height}, "
          f"efficiency {result.efficiency:.1%}, {elapsed:.3f}s")

    if args.show_grid:
        grid = CellGrid(result.used_height)
        pack_into_height(sort_frames(frames), result.used_height, grid)
        print("\nCell grid at optimal height:")
        print(grid.describe())

    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="spritepack", description="Pack png image sequences into compact sprite sheets")
    p.add_argument("--log-file", default=DEFAULT_LOG_FILE, help=f"Debug log path (default: {DEFAULT_LOG_FILE})")
    sub = p.add_subparsers(dest="cmd")

    def add_height_options(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--min-height", type=int, default=0, help="Minimum sprite sheet height in pixels (default: 0)")
        parser.add_argument("--max-height", type=int, help="Maximum sprite sheet height in pixels (default: unbounded)")
        parser.add_argument("--height-step", type=int, default=10, help="Height increment between packing attempts (default: 10)")

    c = sub.add_parser("pack", help="Create a sprite sheet from a png sequence")
    c.add_argument("input", help="Any png file of the sequence, e.g. running001.png")
    c.add_argument("--output", help="Sprite sheet path (default: <base>_spritesheet.png next to the input)")
    c.add_argument("--stage-to-disk", action="store_true", help="Stage cropped frames in a temp folder instead of memory")
    c.add_argument("--write-log", action="store_true", help="Write a run log next to the sprite sheet")
    add_height_options(c)
    c.set_defaults(func=cli_pack)

    d = sub.add_parser("inspect", help="Show trimming and packing results without writing files")
    d.add_argument("input", help="Any png file of the sequence")
    d.add_argument("--show-grid", action="store_true", help="Print the cell grid at the optimal height")
    add_height_options(d)
    d.set_defaults(func=cli_inspect)

    return p


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging first
    setup_logging(args.log_file)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        result = args.func(args)
        logging.info(f"Operation completed with exit code: {result}")
        return result
    except Exception as e:
        logging.error(f"Unhandled exception: {e}", exc_info=True)
        print(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
