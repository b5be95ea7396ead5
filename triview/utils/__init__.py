"""
Utility functions for orientation handling and slice image processing.
"""

from .geometry import (
    Orientation, resolve_orientation, resolve_volume_orientation,
    voxel_to_mm, mm_to_voxel, slice_mm_range,
)
from .image_utils import IntensityLUT, build_lut, normalize_to_bytes, fit_to_box, resample_image

__all__ = [
    'Orientation', 'resolve_orientation', 'resolve_volume_orientation',
    'voxel_to_mm', 'mm_to_voxel', 'slice_mm_range',
    'IntensityLUT', 'build_lut', 'normalize_to_bytes', 'fit_to_box', 'resample_image',
]
