"""
View planes and their fixed RAS axis layout.
"""

from enum import Enum
from typing import NamedTuple


class ViewPlane(Enum):
    AXIAL = "axial"
    CORONAL = "coronal"
    SAGITTAL = "sagittal"

    @property
    def title(self) -> str:
        return self.value.capitalize()

    @property
    def axes(self) -> "PlaneAxes":
        return PLANE_AXES[self]

    @classmethod
    def parse(cls, name) -> "ViewPlane":
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).lower())
        except ValueError:
            raise ValueError(f"Unknown view plane {name!r}, expected one of "
                             f"{[p.value for p in cls]}") from None


class PlaneAxes(NamedTuple):
    """RAS axes (0=R, 1=A, 2=S) shown along display columns and rows, and the slice axis."""
    col_axis: int
    row_axis: int
    slice_axis: int


PLANE_AXES = {
    ViewPlane.AXIAL: PlaneAxes(col_axis=0, row_axis=1, slice_axis=2),
    ViewPlane.CORONAL: PlaneAxes(col_axis=0, row_axis=2, slice_axis=1),
    ViewPlane.SAGITTAL: PlaneAxes(col_axis=1, row_axis=2, slice_axis=0),
}

# Slider letter for each slice axis
AXIS_LABELS = ("X", "Y", "Z")
