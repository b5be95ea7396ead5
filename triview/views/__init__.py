"""
View planes, slice rasterization and per-plane view state.
"""

from .planes import ViewPlane, PlaneAxes, PLANE_AXES
from .rasterizer import SliceRasterizer, render_slice, intermediate_shape
from .slice_view import SliceView

__all__ = ['ViewPlane', 'PlaneAxes', 'PLANE_AXES', 'SliceRasterizer', 'render_slice',
           'intermediate_shape', 'SliceView']
