"""
Core packing driver for the Sprite Sheet Creator.

The greedy placer is run for a range of candidate sheet heights. The first
candidate is as tall as the tallest frame; each following one is taller by
a fixed step. The search stops once the sheet is no wider than the widest
frame, since taller sheets cannot shrink it further, and the arrangement
with the smallest area is kept.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple

from .frames import Frame
from .placer import Positions, pack_into_height, sort_frames, used_width

DEFAULT_HEIGHT_STEP = 10


@dataclass
class PackingConfig:
    """Bounds and step size for the sheet height search."""
    min_height: int = 0  # floor for candidate heights (pixels)
    max_height: Optional[int] = None  # heights from here up are not tried after the first, None for unbounded
    height_step: int = DEFAULT_HEIGHT_STEP

    def validate(self) -> None:
        if self.min_height < 0:
            raise ValueError(f"Minimum height must not be negative, got {self.min_height}")
        if self.height_step <= 0:
            raise ValueError(f"Height step must be positive, got {self.height_step}")
        if self.max_height is not None:
            if self.max_height <= 0:
                raise ValueError(f"Maximum height must be positive, got {self.max_height}")
            if self.max_height < self.min_height:
                raise ValueError(f"Maximum height {self.max_height} is below minimum height {self.min_height}")


class Candidate(NamedTuple):
    """One trial of the height search."""
    height: int
    used_width: int
    area: int


class PlacementRecord(NamedTuple):
    """Final position and metadata of one frame on the sheet."""
    index: int
    x: int
    y: int
    width: int
    height: int
    anchor_x: float
    anchor_y: float


@dataclass
class PackingResult:
    """Result of the height search."""
    used_width: int
    used_height: int
    placements: List[PlacementRecord]  # ordered by frame index
    candidates: List[Candidate] = field(default_factory=list)
    converged: bool = True  # False if the height ceiling ended the search

    @property
    def area(self) -> int:
        return self.used_width * self.used_height

    @property
    def efficiency(self) -> float:
        """Fraction of the sheet covered by frames."""
        if self.area == 0:
            return 0.0
        return sum(p.width * p.height for p in self.placements) / self.area


class SpriteSheetPacker:
    """Finds a compact sheet size and the frame positions on it."""

    def __init__(self, config: Optional[PackingConfig] = None):
        self.config = config or PackingConfig()
        self.config.validate()
        self.logger = logging.getLogger(__name__)

    def try_height(self, ordered: Sequence[Frame], height: int) -> Tuple[Candidate, Positions]:
        """Run the greedy placer once at a fixed height."""
        positions = pack_into_height(ordered, height)
        width = used_width(ordered, positions)
        return Candidate(height, width, width * height), positions

    def pack(self, frames: Sequence[Frame],
             progress: Optional[Callable[[float], None]] = None) -> PackingResult:
        """
        Search candidate heights for the arrangement with the smallest area.

        Args:
            frames: Trimmed frames, in any order
            progress: Called with a rough completion estimate after each trial

        Returns:
            PackingResult with positions from a final run at the best height
        """
        if not frames:
            raise ValueError("No frames to pack")
        indices = [f.index for f in frames]
        if len(set(indices)) != len(indices):
            raise ValueError("Frame indices must be unique")

        ordered = sort_frames(frames)
        widest = max(f.width for f in ordered)
        tallest = ordered[0].height
        config = self.config

        height = max(tallest, config.min_height)
        if config.max_height is not None and height > config.max_height:
            self.logger.warning(f"Tallest frame ({tallest}px) exceeds the maximum sheet height "
                                f"({config.max_height}px); packing at {height}px")

        self.logger.info(f"Searching sheet heights from {height}px in steps of {config.height_step}px "
                         f"for {len(ordered)} frames (widest {widest}px, tallest {tallest}px)")

        candidates: List[Candidate] = []
        best: Optional[Candidate] = None
        converged = True

        while True:
            candidate, _ = self.try_height(ordered, height)
            candidates.append(candidate)
            if best is None or candidate.area < best.area:
                best = candidate

            self.logger.debug(f"  height {candidate.height}: width {candidate.used_width}, "
                              f"area {candidate.area:,}")

            if progress is not None:
                reference_width = candidates[0].used_width
                estimate = 1.0 - (candidate.used_width - widest) / reference_width
                progress(min(1.0, max(0.0, estimate)))

            if candidate.used_width <= widest:
                break

            next_height = height + config.height_step
            if config.max_height is not None and next_height >= config.max_height:
                converged = False
                self.logger.warning(f"Height limit {config.max_height}px reached before the sheet "
                                    f"narrowed to the widest frame; using best arrangement found")
                break
            height = next_height

        # Trial runs are discarded, so pack once more at the winning height.
        final, positions = self.try_height(ordered, best.height)

        placements = [
            PlacementRecord(
                index=f.index,
                x=positions[f.index][0],
                y=positions[f.index][1],
                width=f.width,
                height=f.height,
                anchor_x=f.anchor_x,
                anchor_y=f.anchor_y,
            )
            for f in sorted(ordered, key=lambda f: f.index)
        ]

        result = PackingResult(
            used_width=final.used_width,
            used_height=final.height,
            placements=placements,
            candidates=candidates,
            converged=converged,
        )

        self.logger.info(f"Optimal sheet size: {result.used_width}x{result.used_height} "
                         f"(area {result.area:,}, {len(candidates)} heights tried, "
                         f"efficiency {result.efficiency:.1%})")
        return result
