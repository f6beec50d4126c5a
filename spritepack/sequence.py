"""
Image sequence discovery.

A sequence is a set of png files sharing a base name followed by a frame
number, e.g. running001.png, running002.png, running003.png. Selecting any
one file of the sequence identifies the whole set.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import SequenceError

PNG_SUFFIX = ".png"


def base_name(path: Path) -> str:
    """Strip the .png extension and the trailing frame number from a file name."""
    name = Path(path).name
    if name.lower().endswith(PNG_SUFFIX):
        name = name[:-len(PNG_SUFFIX)]
    return name.rstrip("0123456789")


def frame_index(path: Path, base: str) -> Optional[int]:
    """Return the frame number of a file in the sequence, or None if it is not part of it."""
    name = Path(path).name
    if not name.startswith(base) or not name.lower().endswith(PNG_SUFFIX):
        return None
    digits = name[len(base):-len(PNG_SUFFIX)]
    if not digits.isdecimal():
        return None
    return int(digits)


def find_sequence(selected: Path) -> Tuple[str, List[Tuple[int, Path]]]:
    """
    Find every file belonging to the same sequence as the selected file.

    Args:
        selected: Any png file of the sequence

    Returns:
        Tuple of (base_name, [(index, path), ...]) sorted by frame index
    """
    selected = Path(selected)
    if not selected.is_file():
        raise SequenceError(f"File does not exist: {selected}")

    base = base_name(selected)
    if frame_index(selected, base) is None:
        raise SequenceError(
            f"{selected.name} is not a numbered png file (expected e.g. running001.png)"
        )

    found = {}
    for candidate in sorted(selected.parent.iterdir()):
        if not candidate.is_file():
            continue
        index = frame_index(candidate, base)
        if index is None:
            continue
        if index in found:
            raise SequenceError(
                f"{found[index].name} and {candidate.name} both have frame number {index}"
            )
        found[index] = candidate

    members = sorted(found.items())
    logging.info(f"Found {len(members)} frames for sequence '{base}' in {selected.parent}")
    return base, members


def ensure_png_suffix(path: Path) -> Path:
    path = Path(path)
    if not path.name.endswith(PNG_SUFFIX):
        path = path.with_name(path.name + PNG_SUFFIX)
    return path


def default_output_name(selected: Path) -> str:
    """Suggest a sprite sheet file name for the sequence containing the selected file."""
    return f"{base_name(selected)}_spritesheet{PNG_SUFFIX}"
