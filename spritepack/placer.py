"""
Greedy placement of frames onto a sheet of fixed height.

This is a modified form of the basic packing algorithm described by Matt
Perdeck ("Fast Optimizing Rectangle Packing Algorithm for Building CSS
Sprites", Code Project, 2011). Frames are taken tallest first and each one
goes into the upper-leftmost free position of a CellGrid.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .cells import CellGrid
from .errors import InsufficientHeightError
from .frames import Frame

Positions = Dict[int, Tuple[int, int]]


def sort_frames(frames: Iterable[Frame]) -> List[Frame]:
    """Order frames by decreasing height; frames of equal height keep sequence order."""
    return sorted(frames, key=lambda f: (-f.height, f.index))


def place_frame(grid: CellGrid, frame: Frame) -> Tuple[int, int]:
    """Place one frame at the first free cell scanning columns left to right, rows top to bottom."""
    # Placement only ever adds cells to the right of / below the scanned cell,
    # so iterating over the sizes captured here visits every candidate.
    rows, cols = grid.rows, grid.cols
    for col in range(cols):
        for row in range(rows):
            position = grid.place(frame.width, frame.height, row, col)
            if position is not None:
                return position
    raise InsufficientHeightError(frame.index, frame.height, grid.height)


def pack_into_height(frames: Sequence[Frame], height: int, grid: Optional[CellGrid] = None) -> Positions:
    """
    Pack frames into a sheet of the given height.

    Args:
        frames: Frames sorted tallest first (see sort_frames)
        height: Candidate sheet height in pixels
        grid: Optional empty grid to pack into, for callers that want to inspect it

    Returns:
        Mapping of frame index to (x, y) position
    """
    if grid is None:
        grid = CellGrid(height)

    positions: Positions = {}
    for frame in frames:
        if frame.height > height:
            raise InsufficientHeightError(frame.index, frame.height, height)
        positions[frame.index] = place_frame(grid, frame)

    logging.debug(f"Packed {len(frames)} frames into height {height}: "
                  f"{grid.rows} rows x {grid.cols} cols")
    return positions


def used_width(frames: Sequence[Frame], positions: Positions) -> int:
    """Width actually covered by the placed frames."""
    return max((positions[f.index][0] + f.width for f in frames), default=0)
