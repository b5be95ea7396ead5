"""
Slice rasterization: maps display pixels of a view plane back through the
RAS orientation into the stored voxel buffer, applies the intensity
transfer table and scales the result to the display surface.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from ..utils.geometry import Orientation
from ..utils.image_utils import (
    IntensityLUT, normalize_to_bytes, fit_to_box, resample_coordinates,
    resample_image, gray_to_rgba,
)
from ..config import DEFAULT_CONTRAST, DEFAULT_BRIGHTNESS
from .planes import ViewPlane, PLANE_AXES

logger = logging.getLogger(__name__)


def intermediate_shape(orientation: Orientation, plane) -> Tuple[int, int]:
    """(rows, cols) of a plane's image at source voxel resolution."""
    axes = PLANE_AXES[ViewPlane.parse(plane)]
    return orientation.ras_size[axes.row_axis], orientation.ras_size[axes.col_axis]


def _voxel_strides(dims) -> Tuple[int, int, int]:
    return 1, dims[0], dims[0] * dims[1]


class SliceRasterizer:
    """
    Renders slices of one view at a time.

    Holds the per-view caches (transfer table, free-axis index grid,
    intermediate image, resample grid). Instances are not shared between
    views that render concurrently.
    """

    def __init__(self):
        self.lut = IntensityLUT()
        self._volume = None
        self._orientation: Optional[Orientation] = None
        self._plane: Optional[ViewPlane] = None
        self._index_grid: Optional[np.ndarray] = None
        self._intermediate: Optional[np.ndarray] = None
        self._out_shape: Optional[Tuple[int, int]] = None
        self._coords: Optional[np.ndarray] = None

    def invalidate(self):
        """Drop every cached intermediate, including the transfer table."""
        self.lut.invalidate()
        self._volume = None
        self._orientation = None
        self._drop_plane_caches()

    def _drop_plane_caches(self):
        self._plane = None
        self._index_grid = None
        self._intermediate = None
        self._out_shape = None
        self._coords = None

    @property
    def intermediate(self) -> Optional[np.ndarray]:
        """Copy of the last source-resolution image, or None."""
        return None if self._intermediate is None else self._intermediate.copy()

    def _bind(self, volume, orientation: Orientation, plane: ViewPlane):
        if volume is not self._volume or orientation != self._orientation:
            self.invalidate()
            self._volume = volume
            self._orientation = orientation
        if plane is not self._plane:
            self._drop_plane_caches()
            self._plane = plane
            self._index_grid = self._build_index_grid(volume.dims, orientation, plane)
            self._intermediate = np.empty(self._index_grid.shape, dtype=np.uint8)

    @staticmethod
    def _build_index_grid(dims, orientation: Orientation, plane: ViewPlane) -> np.ndarray:
        """Flat buffer offsets of every (row, col) pixel with the slice term left out."""
        axes = PLANE_AXES[plane]
        strides = _voxel_strides(dims)
        perm, flip, size = orientation.perm, orientation.flip, orientation.ras_size

        def voxel_offsets(ras_axis):
            n = size[ras_axis]
            # Display index d shows RAS coordinate n-1-d
            ras = n - 1 - np.arange(n, dtype=np.int64)
            vox = n - 1 - ras if flip[ras_axis] else ras
            return vox * strides[perm[ras_axis]]

        row_off = voxel_offsets(axes.row_axis)
        col_off = voxel_offsets(axes.col_axis)
        return row_off[:, np.newaxis] + col_off[np.newaxis, :]

    def _slice_offset(self, slice_index: int) -> int:
        axes = PLANE_AXES[self._plane]
        orientation = self._orientation
        n = orientation.ras_size[axes.slice_axis]
        if not 0 <= slice_index < n:
            logger.warning(f"{self._plane.title} slice {slice_index} out of range [0, {n - 1}], clamping")
            slice_index = min(max(slice_index, 0), n - 1)
        vox = n - 1 - slice_index if orientation.flip[axes.slice_axis] else slice_index
        return vox * _voxel_strides(self._volume.dims)[orientation.perm[axes.slice_axis]]

    def render(self, volume, orientation: Orientation, plane, slice_index: int,
               dest_size: Tuple[int, int],
               contrast: float = DEFAULT_CONTRAST,
               brightness: float = DEFAULT_BRIGHTNESS) -> np.ndarray:
        """
        Render one slice as an RGBA image fitted into dest_size.

        Args:
            volume: VolumeData being displayed
            orientation: orientation resolved for that volume
            plane: ViewPlane (or its name)
            slice_index: index along the plane's slice axis
            dest_size: (width, height) of the display surface
            contrast, brightness: transfer table parameters

        Returns:
            uint8 array (height, width, 4); height/width keep the physical
            aspect of the slice within dest_size
        """
        plane = ViewPlane.parse(plane)
        self._bind(volume, orientation, plane)
        axes = PLANE_AXES[plane]

        flat = self._index_grid + self._slice_offset(int(slice_index))
        buffer = volume.voxel_buffer
        assert 0 <= flat.min() and flat.max() < buffer.size, "voxel index outside buffer"
        samples = np.take(buffer, flat, mode='clip')

        normalized = normalize_to_bytes(samples, volume.global_min, volume.global_max)
        lut = self.lut.get(contrast, brightness)
        np.take(lut, normalized, out=self._intermediate)

        rows, cols = self._intermediate.shape
        spacing = orientation.voxel_spacing_ras
        out_w, out_h = fit_to_box(cols, rows, spacing[axes.col_axis], spacing[axes.row_axis],
                                  tuple(dest_size))
        if self._out_shape != (out_h, out_w):
            self._out_shape = (out_h, out_w)
            self._coords = resample_coordinates((rows, cols), self._out_shape)

        gray = resample_image(self._intermediate, self._out_shape, self._coords)
        return gray_to_rgba(gray)


def render_slice(volume, orientation: Orientation, plane, slice_index: int,
                 dest_size: Tuple[int, int],
                 contrast: float = DEFAULT_CONTRAST,
                 brightness: float = DEFAULT_BRIGHTNESS) -> np.ndarray:
    """Render a single slice without keeping any cache around."""
    return SliceRasterizer().render(volume, orientation, plane, slice_index,
                                    dest_size, contrast, brightness)
