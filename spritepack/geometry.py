"""
Geometric checks on a finished packing, using shapely boxes.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from shapely.geometry import box
from shapely.ops import unary_union
from shapely.strtree import STRtree

from .core import PackingResult, PlacementRecord


def placement_boxes(placements: Sequence[PlacementRecord]):
    return [box(p.x, p.y, p.x + p.width, p.y + p.height) for p in placements]


def find_overlaps(placements: Sequence[PlacementRecord]) -> List[Tuple[int, int]]:
    """Return index pairs of frames whose rectangles share a non-zero area."""
    boxes = placement_boxes(placements)
    if not boxes:
        return []
    tree = STRtree(boxes)
    overlaps = []
    for i, frame_box in enumerate(boxes):
        for j in tree.query(frame_box, predicate="intersects"):
            j = int(j)
            # Frames sharing only an edge intersect with zero area.
            if j > i and frame_box.intersection(boxes[j]).area > 0:
                overlaps.append((placements[i].index, placements[j].index))
    return overlaps


def find_out_of_bounds(placements: Sequence[PlacementRecord], width: int, height: int) -> List[int]:
    sheet = box(0, 0, width, height)
    return [p.index for p, frame_box in zip(placements, placement_boxes(placements))
            if not sheet.covers(frame_box)]


def covered_fraction(placements: Sequence[PlacementRecord], width: int, height: int) -> float:
    """Fraction of the sheet area covered by at least one frame."""
    if width <= 0 or height <= 0:
        return 0.0
    return unary_union(placement_boxes(placements)).area / (width * height)


def audit_placements(result: PackingResult) -> List[str]:
    """
    Check a packing result for overlapping frames and frames outside the sheet.

    Returns:
        List of problem descriptions, empty when the layout is sound
    """
    problems = []
    for a, b in find_overlaps(result.placements):
        problems.append(f"Frames {a} and {b} overlap")
    for index in find_out_of_bounds(result.placements, result.used_width, result.used_height):
        problems.append(f"Frame {index} extends past the {result.used_width}x{result.used_height} sheet")

    if problems:
        for problem in problems:
            logging.error(problem)
    else:
        coverage = covered_fraction(result.placements, result.used_width, result.used_height)
        logging.debug(f"Placement audit passed, {coverage:.1%} of the sheet covered")
    return problems
