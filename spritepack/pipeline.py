"""
End-to-end conversion of a png sequence into a sprite sheet.

Used by both the CLI and the GUI. Progress is reported through an optional
callback taking a stage description and a completion fraction; the GUI
forwards those calls to its event loop so packing never waits on the UI.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from .composer import SheetComposer, metadata_path_for
from .core import PackingConfig, PackingResult, SpriteSheetPacker
from .errors import SequenceError, StagingError
from .frames import trim_sequence
from .geometry import audit_placements
from .logger import log_packing_calculation, log_trim_results, write_run_log
from .sequence import default_output_name, ensure_png_suffix, find_sequence

ProgressCallback = Callable[[str, float], None]

STAGE_DIR_NAME = "croppedImagesTempFolder"

CROPPING = "Cropping out transparent pixels..."
PACKING = "Finding a good packing arrangement..."
WRITING_SHEET = "Writing sprite sheet..."
WRITING_METADATA = "Writing metadata file..."
CLEANING_UP = "Deleting temporary files..."


@dataclass
class ConversionReport:
    """Outcome of convert_sequence."""
    sequence_name: str
    result: PackingResult
    sheet_path: Path
    metadata_path: Path
    files_found: int
    errors: List[str] = field(default_factory=list)  # files skipped as unreadable
    elapsed: float = 0.0


def _stage(progress: Optional[ProgressCallback], description: str) -> Optional[Callable[[float], None]]:
    """Announce a stage and return a fraction-only callback bound to it."""
    if progress is None:
        return None
    progress(description, 0.0)
    return lambda fraction: progress(description, fraction)


def create_stage_dir(parent: Path) -> Path:
    stage_dir = Path(parent) / STAGE_DIR_NAME
    try:
        stage_dir.mkdir()
    except OSError as e:
        raise StagingError(
            f"Could not create temp directory {stage_dir}. "
            f"Do you have write permissions for this directory? ({e})"
        ) from e
    logging.debug(f"Created staging directory: {stage_dir}")
    return stage_dir


def remove_stage_dir(stage_dir: Path, progress: Optional[Callable[[float], None]] = None) -> bool:
    """
    Delete the staged files and the staging directory.

    Returns:
        True if everything was removed; leftovers are logged, not raised
    """
    files = list(stage_dir.iterdir())
    failed = []
    for done, path in enumerate(files, start=1):
        try:
            path.unlink()
        except OSError as e:
            failed.append(path)
            logging.debug(f"Could not delete {path}: {e}")
        if progress is not None:
            progress(done / len(files))

    if failed:
        logging.warning(f"{len(failed)} temporary file(s) could not be deleted. "
                        f"They are located in {stage_dir}")
        return False
    try:
        stage_dir.rmdir()
    except OSError as e:
        logging.warning(f"The temp folder {stage_dir} could not be deleted: {e}")
        return False
    return True


def convert_sequence(
    selected: Path,
    output: Optional[Path] = None,
    config: Optional[PackingConfig] = None,
    progress: Optional[ProgressCallback] = None,
    stage_to_disk: bool = False,
    write_log: bool = False,
) -> ConversionReport:
    """
    Convert the png sequence containing `selected` into a sprite sheet.

    Args:
        selected: Any file of the sequence
        output: Sprite sheet path; defaults to <base>_spritesheet.png next to the input
        config: Height search settings
        progress: Receives (stage description, fraction) notifications
        stage_to_disk: Keep cropped frames in a temp folder instead of memory
        write_log: Also write a run log next to the sheet

    Returns:
        ConversionReport describing the written files
    """
    start_time = time.time()
    timestamp = datetime.now()
    selected = Path(selected)

    sequence_name, files = find_sequence(selected)
    if output is None:
        output = selected.parent / default_output_name(selected)
    output = ensure_png_suffix(output)
    logging.info(f"Converting sequence '{sequence_name}' ({len(files)} files) to {output}")

    stage_dir = None
    try:
        if stage_to_disk:
            stage_dir = create_stage_dir(selected.parent)
        frames, errors = trim_sequence(files, stage_dir, sequence_name,
                                       progress=_stage(progress, CROPPING))
        log_trim_results(sequence_name, len(files), frames, errors)
        if not frames:
            raise SequenceError(f"No readable frames in sequence '{sequence_name}'")

        packer = SpriteSheetPacker(config)
        pack_start = time.time()
        result = packer.pack(frames, progress=_stage(progress, PACKING))
        log_packing_calculation(sequence_name, result, time.time() - pack_start)

        problems = audit_placements(result)
        if problems:
            raise RuntimeError(f"Packing produced an invalid layout: {problems[0]}")

        composer = SheetComposer(progress=_stage(progress, WRITING_SHEET))
        sheet = composer.compose(result, frames)
        sheet_path = composer.write_sheet(sheet, output)

        composer.progress = _stage(progress, WRITING_METADATA)
        metadata_path = composer.write_metadata(result, metadata_path_for(sheet_path))
    except Exception as e:
        if write_log:
            write_run_log(output.with_suffix(".log"), sequence_name, timestamp,
                          len(files), 0, output, (0, 0),
                          time.time() - start_time, error=str(e))
        raise
    finally:
        if stage_dir is not None:
            remove_stage_dir(stage_dir, _stage(progress, CLEANING_UP))

    elapsed = time.time() - start_time
    if write_log:
        write_run_log(sheet_path.with_suffix(".log"), sequence_name, timestamp,
                      len(files), len(frames), sheet_path,
                      (result.used_width, result.used_height), elapsed)

    return ConversionReport(
        sequence_name=sequence_name,
        result=result,
        sheet_path=sheet_path,
        metadata_path=metadata_path,
        files_found=len(files),
        errors=errors,
        elapsed=elapsed,
    )
