"""
Frame trimming for the sprite sheet packer.

Each frame of an image sequence is cropped down to the bounding box of its
non-transparent pixels. The anchor point records where the original
image's center lands inside the cropped frame, so a consumer can keep the
sprite visually fixed even as the cropped size changes from frame to frame.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple, Union

import numpy as np
from PIL import Image

from .errors import FrameDecodeError, StagingError

PixelSource = Union[Image.Image, Path]


@dataclass(frozen=True)
class Frame:
    """A trimmed frame of the sequence, identified by its sequence index."""
    index: int
    width: int
    height: int
    anchor_x: float
    anchor_y: float
    source: PixelSource = field(compare=False, repr=False)
    original_size: Tuple[int, int] = (0, 0)
    is_placeholder: bool = False

    @property
    def area(self) -> int:
        return self.width * self.height

    def load_pixels(self) -> Image.Image:
        """Return the cropped pixels, reading them back if they were staged to disk."""
        if isinstance(self.source, Image.Image):
            return self.source
        with Image.open(self.source) as img:
            return img.convert("RGBA")


def alpha_bounding_box(image: Image.Image) -> Optional[Tuple[int, int, int, int]]:
    """
    Find the box enclosing every pixel whose alpha is non-zero.

    Args:
        image: RGBA image

    Returns:
        (min_x, min_y, max_x, max_y) inclusive, or None if every pixel is transparent
    """
    alpha = np.asarray(image.getchannel("A"))
    if alpha.size == 0:
        return None
    rows = np.flatnonzero(alpha.any(axis=1))
    cols = np.flatnonzero(alpha.any(axis=0))
    if rows.size == 0:
        return None
    return int(cols[0]), int(rows[0]), int(cols[-1]), int(rows[-1])


def trim_image(image: Image.Image, index: int) -> Frame:
    """
    Crop transparent borders from a decoded frame.

    Args:
        image: Decoded frame; converted to RGBA if it has no alpha channel
        index: Sequence index of the frame

    Returns:
        Frame holding the cropped pixels and the anchor of the original center
    """
    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    original_width, original_height = rgba.size

    bbox = alpha_bounding_box(rgba)
    if bbox is None:
        # Fully transparent frame: keep a single transparent pixel so the
        # packer never sees zero-sized geometry.
        min_x, min_y, width, height = 0, 0, 1, 1
        placeholder = True
        logging.debug(f"Frame {index} is fully transparent, using 1x1 placeholder")
    else:
        min_x, min_y, max_x, max_y = bbox
        width = max_x - min_x + 1
        height = max_y - min_y + 1
        placeholder = False

    anchor_x = original_width / 2.0 - min_x
    anchor_y = original_height / 2.0 - min_y
    cropped = rgba.crop((min_x, min_y, min_x + width, min_y + height))

    logging.debug(f"Trimmed frame {index}: {original_width}x{original_height} -> "
                  f"{width}x{height} at ({min_x},{min_y}), anchor ({anchor_x}, {anchor_y})")

    return Frame(
        index=index,
        width=width,
        height=height,
        anchor_x=anchor_x,
        anchor_y=anchor_y,
        source=cropped,
        original_size=(original_width, original_height),
        is_placeholder=placeholder,
    )


def staged_frame_path(stage_dir: Path, prefix: str, index: int) -> Path:
    return stage_dir / f"{prefix}{index:07d}.png"


def trim_file(path: Path, index: int, stage_dir: Optional[Path] = None,
              stage_prefix: str = "frame") -> Frame:
    """
    Decode and trim one image file.

    When stage_dir is given, the cropped pixels are written there as a png
    and the returned Frame refers to that file instead of holding the
    pixels in memory.
    """
    try:
        with Image.open(path) as img:
            img.load()
            frame = trim_image(img, index)
    except (OSError, ValueError) as e:
        raise FrameDecodeError(path, e) from e

    if stage_dir is None:
        return frame

    staged_path = staged_frame_path(stage_dir, stage_prefix, index)
    try:
        frame.source.save(staged_path, format="PNG")
    except OSError as e:
        raise StagingError(f"Could not write cropped frame {staged_path}: {e}") from e

    return Frame(
        index=frame.index,
        width=frame.width,
        height=frame.height,
        anchor_x=frame.anchor_x,
        anchor_y=frame.anchor_y,
        source=staged_path,
        original_size=frame.original_size,
        is_placeholder=frame.is_placeholder,
    )


def trim_sequence(
    files: Sequence[Tuple[int, Path]],
    stage_dir: Optional[Path] = None,
    stage_prefix: str = "frame",
    progress: Optional[Callable[[float], None]] = None,
) -> Tuple[List[Frame], List[str]]:
    """
    Trim every file of a sequence.

    Unreadable files are skipped and reported rather than aborting the run.

    Args:
        files: (index, path) pairs
        stage_dir: Optional folder to stage cropped frames in
        stage_prefix: File name prefix for staged frames
        progress: Called with the fraction of files processed

    Returns:
        Tuple of (frames, error_messages)
    """
    frames: List[Frame] = []
    errors: List[str] = []
    total = len(files)

    for processed, (index, path) in enumerate(files, start=1):
        try:
            frames.append(trim_file(path, index, stage_dir, stage_prefix))
        except FrameDecodeError as e:
            logging.error(str(e))
            errors.append(str(e))
        if progress is not None:
            progress(processed / total)

    placeholders = sum(1 for f in frames if f.is_placeholder)
    if placeholders:
        logging.info(f"{placeholders} fully transparent frame(s) replaced by 1x1 placeholders")

    return frames, errors
