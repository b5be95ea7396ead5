"""
Per-plane view state: slice position, scroll handling and rendering.
"""

import math
from typing import Optional, Tuple

import numpy as np

from ..config import SCROLL_STEP, DEFAULT_CONTRAST, DEFAULT_BRIGHTNESS
from ..utils.geometry import Orientation, voxel_to_mm, mm_to_voxel, slice_mm_range
from .planes import ViewPlane, PLANE_AXES, AXIS_LABELS
from .rasterizer import SliceRasterizer


class SliceView:
    """One of the three orthogonal views, with its own rasterizer."""

    def __init__(self, plane):
        self.plane = ViewPlane.parse(plane)
        self.slice_axis = PLANE_AXES[self.plane].slice_axis
        self.rasterizer = SliceRasterizer()
        self.volume = None
        self.orientation: Optional[Orientation] = None
        self.slice_index = 0
        self._scroll_accum = 0.0

    @property
    def has_volume(self) -> bool:
        return self.volume is not None

    def set_volume(self, volume, orientation: Orientation):
        """Show a new volume, centred along the slice axis."""
        self.rasterizer.invalidate()
        self.volume = volume
        self.orientation = orientation
        self.slice_index = orientation.ras_size[self.slice_axis] // 2
        self._scroll_accum = 0.0

    def clear(self):
        self.rasterizer.invalidate()
        self.volume = None
        self.orientation = None
        self.slice_index = 0
        self._scroll_accum = 0.0

    def _require_volume(self):
        if self.orientation is None:
            raise RuntimeError(f"{self.plane.title} view has no volume loaded")

    @property
    def max_slice(self) -> int:
        self._require_volume()
        return self.orientation.ras_size[self.slice_axis] - 1

    def set_slice(self, index: int) -> int:
        """Move to a slice index, clamped to the volume. Returns the new index."""
        self._require_volume()
        self.slice_index = max(0, min(self.max_slice, int(index)))
        return self.slice_index

    def set_slice_mm(self, mm: float) -> int:
        """Move to the slice nearest a display position in mm."""
        self._require_volume()
        self.slice_index = mm_to_voxel(self.orientation, self.slice_axis, mm)
        return self.slice_index

    def scroll(self, delta: float) -> int:
        """
        Feed a mouse wheel delta. Every SCROLL_STEP units of accumulated
        delta moves one slice; positive deltas move towards lower indices.
        """
        self._require_volume()
        self._scroll_accum += delta
        steps = math.trunc(self._scroll_accum / SCROLL_STEP)
        if steps:
            self._scroll_accum -= steps * SCROLL_STEP
            self.set_slice(self.slice_index - steps)
        return self.slice_index

    @property
    def slice_mm(self) -> float:
        self._require_volume()
        return voxel_to_mm(self.orientation, self.slice_axis, self.slice_index)

    @property
    def mm_range(self) -> Tuple[float, float, float]:
        self._require_volume()
        return slice_mm_range(self.orientation, self.slice_axis)

    @property
    def label(self) -> str:
        return f"{self.plane.title} {AXIS_LABELS[self.slice_axis]} = {self.slice_mm:.1f} mm"

    @property
    def index_label(self) -> str:
        return f"{self.slice_index}/{self.max_slice}"

    def render(self, dest_size: Tuple[int, int],
               contrast: float = DEFAULT_CONTRAST,
               brightness: float = DEFAULT_BRIGHTNESS) -> np.ndarray:
        self._require_volume()
        return self.rasterizer.render(self.volume, self.orientation, self.plane,
                                      self.slice_index, dest_size, contrast, brightness)
