"""Exception types raised by the sprite sheet pipeline."""


class SpriteSheetError(Exception):
    """Base class for recoverable errors reported to the user."""


class SequenceError(SpriteSheetError):
    """The selected file does not identify a numbered png sequence."""


class FrameDecodeError(SpriteSheetError):
    """An input frame could not be read or decoded."""

    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read image: {path} - {reason}")


class StagingError(SpriteSheetError):
    """The temporary folder for cropped frames could not be created."""


class SheetWriteError(SpriteSheetError):
    """The sprite sheet or its metadata file could not be written."""


class InsufficientHeightError(RuntimeError):
    """A frame is taller than the candidate sheet height.

    The height search never starts below the tallest frame, so this
    signals a programming error rather than bad input.
    """

    def __init__(self, frame_index: int, frame_height: int, sheet_height: int):
        self.frame_index = frame_index
        self.frame_height = frame_height
        self.sheet_height = sheet_height
        super().__init__(
            f"Frame {frame_index} ({frame_height}px tall) does not fit "
            f"in a sheet {sheet_height}px tall"
        )
