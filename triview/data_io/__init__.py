"""
Input/Output operations for volumes and rendered views.
"""

from .export import export_views
from .nifti_loader import VolumeData, load_volume, load_nifti_file, make_volume, scan_intensity_range

__all__ = ['export_views', 'VolumeData', 'load_volume', 'load_nifti_file', 'make_volume',
           'scan_intensity_range']
