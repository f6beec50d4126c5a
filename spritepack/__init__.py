"""
Sprite Sheet Creator - compact sprite sheets from png image sequences

This package trims transparent borders from each frame of an animation,
packs the frames onto a single sheet with a greedy cell-subdivision
algorithm, and exports the sheet with a per-frame metadata file.
"""

__version__ = "1.0.0"
__author__ = "Sprite Sheet Creator Team"
