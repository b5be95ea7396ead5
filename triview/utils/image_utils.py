"""
Image processing utilities for rendered slices.
"""

import math
from typing import Optional, Tuple

import numpy as np
from scipy.ndimage import map_coordinates

from ..config import LUT_SIZE, LUT_CENTER, NORMALIZED_MAX, RESAMPLE_ORDER


def build_lut(contrast: float, brightness: float) -> np.ndarray:
    """
    Build the brightness/contrast transfer table.

    lut[i] = clamp_byte((i - 128) * contrast + 128 + brightness), rounded
    half to even like a clamped byte array.
    """
    if not (math.isfinite(contrast) and math.isfinite(brightness)):
        raise ValueError(f"Contrast and brightness must be finite, got {contrast}, {brightness}")
    values = (np.arange(LUT_SIZE, dtype=np.float64) - LUT_CENTER) * contrast + LUT_CENTER + brightness
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


class IntensityLUT:
    """Transfer table memoised on the last (contrast, brightness) pair."""

    def __init__(self):
        self._table: Optional[np.ndarray] = None
        self._params: Optional[Tuple[float, float]] = None
        self.builds = 0

    def get(self, contrast: float, brightness: float) -> np.ndarray:
        params = (float(contrast), float(brightness))
        if self._table is None or params != self._params:
            self._table = build_lut(*params)
            self._table.setflags(write=False)
            self._params = params
            self.builds += 1
        return self._table

    def invalidate(self):
        self._table = None
        self._params = None


def normalize_to_bytes(samples: np.ndarray, global_min: float, global_max: float) -> np.ndarray:
    """
    Map raw samples to 0..255 using the volume's global intensity range.

    A zero range (constant volume) maps every sample to full scale. NaN
    samples map to 0. Results are clipped and truncated to uint8.
    """
    value_range = float(global_max) - float(global_min)
    if value_range == 0:
        return np.full(samples.shape, NORMALIZED_MAX, dtype=np.uint8)
    scaled = (samples.astype(np.float64) - global_min) * (NORMALIZED_MAX / value_range)
    scaled = np.nan_to_num(scaled, nan=0.0, posinf=NORMALIZED_MAX, neginf=0.0)
    return np.clip(scaled, 0, NORMALIZED_MAX).astype(np.uint8)


def fit_to_box(cols: int, rows: int, spacing_w: float, spacing_h: float,
               box: Tuple[int, int]) -> Tuple[int, int]:
    """
    Size (width, height) of a slice scaled into a box at its physical aspect.

    The physical aspect is (cols * spacing_w) / (rows * spacing_h). When the
    box is wider than that the height is the constraint, otherwise the width.
    An empty box falls back to the physical size in millimetres.
    """
    phys_aspect = (cols * spacing_w) / (rows * spacing_h)
    box_w, box_h = box
    if box_w > 0 and box_h > 0:
        if box_w / box_h > phys_aspect:
            height = box_h
            width = math.floor(height * phys_aspect + 0.5)
        else:
            width = box_w
            height = math.floor(width / phys_aspect + 0.5)
    else:
        width = math.floor(cols * spacing_w + 0.5)
        height = math.floor(rows * spacing_h + 0.5)
    return max(1, int(width)), max(1, int(height))


def resample_coordinates(src_shape: Tuple[int, int], out_shape: Tuple[int, int]) -> np.ndarray:
    """Pixel-centre aligned source coordinates for every output pixel."""
    src_h, src_w = src_shape
    out_h, out_w = out_shape
    ys = (np.arange(out_h, dtype=np.float64) + 0.5) * (src_h / out_h) - 0.5
    xs = (np.arange(out_w, dtype=np.float64) + 0.5) * (src_w / out_w) - 0.5
    yy, xx = np.meshgrid(ys, xs, indexing='ij')
    return np.stack([yy, xx])


def resample_image(image: np.ndarray, out_shape: Tuple[int, int],
                   coords: Optional[np.ndarray] = None,
                   order: int = RESAMPLE_ORDER) -> np.ndarray:
    """
    Resample a 2D uint8 image to out_shape (height, width) with spline
    interpolation, rounding and clipping back to uint8.
    """
    if image.shape == tuple(out_shape):
        return image.copy()
    if coords is None:
        coords = resample_coordinates(image.shape, out_shape)
    resampled = map_coordinates(image.astype(np.float32), coords, order=order, mode='nearest')
    return np.clip(np.rint(resampled), 0, 255).astype(np.uint8)


def gray_to_rgba(gray: np.ndarray) -> np.ndarray:
    """Expand a 2D uint8 image to opaque RGBA (R = G = B = gray)."""
    rgba = np.empty(gray.shape + (4,), dtype=np.uint8)
    rgba[..., 0] = gray
    rgba[..., 1] = gray
    rgba[..., 2] = gray
    rgba[..., 3] = 255
    return rgba
