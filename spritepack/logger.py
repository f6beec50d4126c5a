"""
Logging utilities for the Sprite Sheet Creator.

Handles application logging and the per-run log written next to a sheet.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

DEFAULT_LOG_FILE = "spritepack_debug.log"


def setup_logging(log_file: str = DEFAULT_LOG_FILE, console_level: int = logging.INFO) -> Path:
    """Setup logging to both file and console."""
    # Create logger
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    # Clear existing handlers
    logger.handlers.clear()

    # File handler - detailed logs
    file_handler = logging.FileHandler(log_file, mode='w')
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s')
    file_handler.setFormatter(file_formatter)

    # Console handler - important messages only
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_formatter = logging.Formatter('%(levelname)s: %(message)s')
    console_handler.setFormatter(console_formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logging.info(f"Logging initialized. Debug log: {log_file}")
    return Path(log_file)


def log_trim_results(sequence_name: str, total_files: int, frames: list, errors: List[str]):
    """
    Log frame trimming results to debug log.

    Args:
        sequence_name: Base name of the image sequence
        total_files: Number of files found in the sequence
        frames: Trimmed Frame objects
        errors: Messages for files that could not be read
    """
    logger = logging.getLogger(__name__)

    logger.info(f"Trim results for sequence '{sequence_name}':")
    logger.info(f"  Files found: {total_files}")
    logger.info(f"  Frames trimmed: {len(frames)}")
    logger.info(f"  Fully transparent: {sum(1 for f in frames if f.is_placeholder)}")
    logger.info(f"  Unreadable files: {len(errors)}")

    if frames:
        original_area = sum(f.original_size[0] * f.original_size[1] for f in frames)
        trimmed_area = sum(f.area for f in frames)
        if original_area:
            logger.info(f"  Pixels kept after trimming: {trimmed_area / original_area:.1%}")

    if errors:
        logger.warning("Unreadable files:")
        for error in errors[:10]:  # Log first 10 errors
            logger.warning(f"  - {error}")
        if len(errors) > 10:
            logger.warning(f"  ... and {len(errors) - 10} more errors")


def log_packing_calculation(sequence_name: str, packing_result, calculation_time: float):
    """
    Log packing calculation results.

    Args:
        sequence_name: Base name of the image sequence
        packing_result: PackingResult object
        calculation_time: Time taken for calculation
    """
    logger = logging.getLogger(__name__)

    logger.info(f"Packing calculation for sequence '{sequence_name}':")
    logger.info(f"  Sheet: {packing_result.used_width}x{packing_result.used_height} pixels")
    logger.info(f"  Area: {packing_result.area:,} pixels")
    logger.info(f"  Heights tried: {len(packing_result.candidates)}")
    logger.info(f"  Converged: {'yes' if packing_result.converged else 'no (height limit reached)'}")
    logger.info(f"  Efficiency: {packing_result.efficiency:.1%}")
    logger.info(f"  Calculation time: {calculation_time:.3f} seconds")


def write_run_log(log_path: Path, sequence_name: str, timestamp: datetime,
                  num_files: int, frames_packed: int, sheet_path: Path,
                  sheet_size: tuple, process_time: float,
                  error: Optional[str] = None):
    """
    Write a summary of one conversion run to a log file.

    Args:
        log_path: Path to log file
        sequence_name: Base name of the image sequence
        timestamp: Run start timestamp
        num_files: Number of files in the sequence
        frames_packed: Number of frames placed on the sheet
        sheet_path: Path of the sprite sheet
        sheet_size: Sheet dimensions (width, height)
        process_time: Processing time in seconds
        error: Error message if the run failed
    """
    log_content = f"""Sprite Sheet Creator - Run Log
{'=' * 50}

Run Information:
    Sequence: {sequence_name}
    Timestamp: {timestamp.strftime('%Y-%m-%d %H:%M:%S')}
    Status: {'SUCCESS' if error is None else 'ERROR'}

Input:
    Files In Sequence: {num_files}
    Frames Packed: {frames_packed}

Output:
    Sprite Sheet: {sheet_path}
    Sheet Size: {sheet_size[0]} x {sheet_size[1]} pixels
    Total Pixels: {sheet_size[0] * sheet_size[1]:,}

Process Information:
    Processing Time: {process_time:.2f} seconds
    Completion Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}
"""

    if error:
        log_content += f"""
Error Information:
    Error: {error}
"""

    logger = logging.getLogger(__name__)
    try:
        with open(log_path, 'w', encoding='utf-8') as f:
            f.write(log_content)
        logger.info(f"Run log written: {log_path}")
    except OSError as e:
        logger.error(f"Failed to write run log {log_path}: {e}")
