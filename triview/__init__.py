"""
Tri-planar NIfTI viewer core

Displays a NIfTI volume as three orthogonal slices:
- Canonical RAS orientation derived from the voxel-to-world affine
- Axial, coronal and sagittal views, each scrollable on its own
- Slice positions in millimetres (Left-positive, as in common reference viewers)
- Linear contrast/brightness transfer table
- Rendering scaled to a display surface at the physical aspect ratio
- PNG export of rendered views
"""

from .data_io import VolumeData, load_volume, load_nifti_file, make_volume
from .exceptions import LoadError, InvalidHeader, UnsupportedDatatype
from .utils import Orientation, resolve_orientation, resolve_volume_orientation, voxel_to_mm, mm_to_voxel
from .views import ViewPlane, SliceRasterizer, SliceView, render_slice
from .viewer import TriplanarViewer, DisplayParameters

__version__ = "1.0.0"
__all__ = [
    "VolumeData", "load_volume", "load_nifti_file", "make_volume",
    "LoadError", "InvalidHeader", "UnsupportedDatatype",
    "Orientation", "resolve_orientation", "resolve_volume_orientation", "voxel_to_mm", "mm_to_voxel",
    "ViewPlane", "SliceRasterizer", "SliceView", "render_slice",
    "TriplanarViewer", "DisplayParameters",
]
