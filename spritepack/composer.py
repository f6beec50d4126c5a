"""
Sprite sheet composition and export.

Draws each trimmed frame at its packed position on a transparent sheet and
writes the sheet as a png together with a csv metadata file. Each metadata
line describes one frame, in frame index order:

    x,y,width,height,anchorX,anchorY
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from PIL import Image

from .core import PackingResult
from .errors import SheetWriteError
from .frames import Frame

MetadataRow = Tuple[int, int, int, int, float, float]


def metadata_path_for(sheet_path: Path) -> Path:
    """Metadata file name for a sheet: running_spritesheet.png -> running_spritesheet_metadata.csv"""
    sheet_path = Path(sheet_path)
    return sheet_path.with_name(f"{sheet_path.stem}_metadata.csv")


def format_metadata_line(x: int, y: int, width: int, height: int,
                         anchor_x: float, anchor_y: float) -> str:
    return f"{x},{y},{width},{height},{anchor_x!r},{anchor_y!r}\n"


def read_metadata(path: Path) -> List[MetadataRow]:
    """Parse a metadata file written by SheetComposer.write_metadata."""
    rows = []
    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            fields = line.split(",")
            if len(fields) != 6:
                raise ValueError(f"{path}:{line_number}: expected 6 fields, found {len(fields)}")
            x, y, width, height = (int(v) for v in fields[:4])
            rows.append((x, y, width, height, float(fields[4]), float(fields[5])))
    return rows


class SheetComposer:
    """Builds the sprite sheet image and metadata from a packing result."""

    def __init__(self, progress: Optional[Callable[[float], None]] = None):
        self.progress = progress
        self.logger = logging.getLogger(__name__)

    def _report(self, done: int, total: int) -> None:
        if self.progress is not None and total:
            self.progress(done / total)

    def compose(self, result: PackingResult, frames: Sequence[Frame]) -> Image.Image:
        """
        Draw every frame onto a transparent sheet.

        Args:
            result: Packing result giving the sheet size and frame positions
            frames: The frames that were packed

        Returns:
            RGBA image of result.used_width x result.used_height pixels
        """
        by_index: Dict[int, Frame] = {f.index: f for f in frames}
        missing = [p.index for p in result.placements if p.index not in by_index]
        if missing:
            raise ValueError(f"No pixels for placed frames: {missing}")

        self.logger.info(f"Composing {result.used_width}x{result.used_height} sheet "
                         f"with {len(result.placements)} frames")
        sheet = Image.new("RGBA", (result.used_width, result.used_height), (0, 0, 0, 0))

        total = len(result.placements)
        for done, placement in enumerate(result.placements, start=1):
            pixels = by_index[placement.index].load_pixels()
            if pixels.mode != "RGBA":
                pixels = pixels.convert("RGBA")
            sheet.paste(pixels, (placement.x, placement.y))
            self._report(done, total)

        return sheet

    def write_sheet(self, sheet: Image.Image, path: Path) -> Path:
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            sheet.save(path, format="PNG")
        except (OSError, ValueError) as e:
            raise SheetWriteError(f"Could not write sprite sheet {path}: {e}") from e
        self.logger.info(f"Wrote sprite sheet: {path}")
        return path

    def write_metadata(self, result: PackingResult, path: Path) -> Path:
        """Write one csv line per frame, ordered by frame index."""
        path = Path(path)
        ordered = sorted(result.placements, key=lambda p: p.index)
        total = len(ordered)
        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                for done, p in enumerate(ordered, start=1):
                    f.write(format_metadata_line(p.x, p.y, p.width, p.height, p.anchor_x, p.anchor_y))
                    self._report(done, total)
        except OSError as e:
            raise SheetWriteError(f"Could not write metadata file {path}: {e}") from e
        self.logger.info(f"Wrote metadata: {path}")
        return path
