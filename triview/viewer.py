"""
Tri-planar viewer session: one loaded volume shown in axial, coronal and
sagittal views sharing contrast/brightness.
"""

import os
import logging
import concurrent.futures
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import numpy as np

from .config import (
    DEFAULT_CONTRAST, DEFAULT_BRIGHTNESS, CONTRAST_RANGE, BRIGHTNESS_RANGE,
    DEFAULT_RENDER_SIZE,
)
from .data_io.nifti_loader import VolumeData, load_volume, load_nifti_file
from .utils.geometry import Orientation, resolve_volume_orientation
from .views.planes import ViewPlane
from .views.slice_view import SliceView

logger = logging.getLogger(__name__)


@dataclass
class DisplayParameters:
    contrast: float = DEFAULT_CONTRAST
    brightness: float = DEFAULT_BRIGHTNESS


class TriplanarViewer:
    """Holds the displayed volume, its orientation and the three views."""

    def __init__(self):
        self.volume: Optional[VolumeData] = None
        self.orientation: Optional[Orientation] = None
        self.display = DisplayParameters()
        self.views = {plane: SliceView(plane) for plane in ViewPlane}

    @property
    def has_volume(self) -> bool:
        return self.volume is not None

    def view(self, plane) -> SliceView:
        return self.views[ViewPlane.parse(plane)]

    def set_volume(self, volume: VolumeData) -> Orientation:
        """
        Display a loaded volume. The orientation is resolved before any view
        sees the new buffer; if that fails the current volume stays.
        """
        orientation = resolve_volume_orientation(volume)
        self.volume = volume
        self.orientation = orientation
        for view in self.views.values():
            view.set_volume(volume, orientation)
        logger.info(f"Displaying {volume.source}: RAS size {orientation.ras_size}, "
                    f"spacing {orientation.voxel_spacing_ras}")
        return orientation

    def load_file(self, file_path: str) -> VolumeData:
        try:
            volume = load_nifti_file(file_path)
            self.set_volume(volume)
        except Exception as e:
            logger.error(f"Failed to load {file_path}: {e}")
            raise
        return volume

    def load_bytes(self, data: bytes, name: str = "<memory>") -> VolumeData:
        try:
            volume = load_volume(data, source=os.path.basename(name))
            self.set_volume(volume)
        except Exception as e:
            logger.error(f"Failed to load {name}: {e}")
            raise
        return volume

    def unload(self):
        self.volume = None
        self.orientation = None
        for view in self.views.values():
            view.clear()

    def set_contrast(self, contrast: float):
        lo, hi = CONTRAST_RANGE
        if not lo <= contrast <= hi:
            raise ValueError(f"Contrast {contrast} outside [{lo}, {hi}]")
        self.display.contrast = float(contrast)

    def set_brightness(self, brightness: float):
        lo, hi = BRIGHTNESS_RANGE
        if not lo <= brightness <= hi:
            raise ValueError(f"Brightness {brightness} outside [{lo}, {hi}]")
        self.display.brightness = float(brightness)

    def render(self, plane, size: Tuple[int, int] = DEFAULT_RENDER_SIZE) -> np.ndarray:
        return self.view(plane).render(size, self.display.contrast, self.display.brightness)

    def render_all(self, size: Tuple[int, int] = DEFAULT_RENDER_SIZE,
                   parallel: bool = True) -> Dict[ViewPlane, np.ndarray]:
        """Render every view; with parallel=True each plane renders on its own worker."""
        if not parallel:
            return {plane: self.render(plane, size) for plane in ViewPlane}

        images = {}
        with concurrent.futures.ThreadPoolExecutor(max_workers=len(self.views)) as executor:
            future_to_plane = {
                executor.submit(self.render, plane, size): plane
                for plane in ViewPlane
            }
            for future in concurrent.futures.as_completed(future_to_plane):
                images[future_to_plane[future]] = future.result()
        return {plane: images[plane] for plane in ViewPlane}
