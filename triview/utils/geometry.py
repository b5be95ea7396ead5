"""
Geometric utilities: canonical RAS orientation of a voxel grid and the
conversion between slice indices and millimetres along a RAS axis.
"""

import math
import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from ..exceptions import InvalidHeader

logger = logging.getLogger(__name__)

RAS_AXES = ("R", "A", "S")


@dataclass(frozen=True)
class Orientation:
    """
    Mapping from the stored voxel grid to a Right-Anterior-Superior grid.

    Attributes:
        perm: perm[ras_axis] is the voxel axis (0=i, 1=j, 2=k) aligned with it
        flip: flip[ras_axis] is True when that voxel axis runs against RAS
        ras_size: grid extent along R, A, S
        voxel_spacing_ras: voxel spacing in mm along R, A, S (always positive)
        ras_origin: world RAS coordinate of reoriented voxel (0, 0, 0)
    """
    perm: Tuple[int, int, int]
    flip: Tuple[bool, bool, bool]
    ras_size: Tuple[int, int, int]
    voxel_spacing_ras: Tuple[float, float, float]
    ras_origin: Tuple[float, float, float]

    @property
    def axcodes(self) -> Tuple[str, str, str]:
        """Stored axis codes (nibabel style), e.g. ('L', 'A', 'S')."""
        codes = [""] * 3
        opposite = {"R": "L", "A": "P", "S": "I"}
        for ras_axis, voxel_axis in enumerate(self.perm):
            name = RAS_AXES[ras_axis]
            codes[voxel_axis] = opposite[name] if self.flip[ras_axis] else name
        return tuple(codes)


def _as_affine(affine) -> np.ndarray:
    arr = np.asarray(affine, dtype=np.float64)
    if arr.shape not in ((4, 4), (3, 4)):
        raise InvalidHeader(f"Affine must be 3x4 or 4x4, got shape {arr.shape}")
    if not np.all(np.isfinite(arr[:3])):
        raise InvalidHeader("Affine contains non-finite coefficients")
    return arr[:3]


def resolve_orientation(affine, dims: Sequence[int], pixdims: Sequence[float]) -> Orientation:
    """
    Derive the RAS orientation of a voxel grid from its voxel-to-world affine.

    For R, A and S in turn, the unused voxel axis with the largest absolute
    coefficient in that world row is assigned to it. This greedy choice is
    exact for axis-aligned grids and an approximation for oblique ones where
    no single voxel axis dominates a world axis.

    Args:
        affine: 4x4 (or 3x4) matrix, rows = world R, A, S, columns = i, j, k, t
        dims: voxel grid extents (i, j, k)
        pixdims: voxel spacing (i, j, k)

    Returns:
        Orientation for the grid

    Raises:
        InvalidHeader: degenerate affine, bad dims or zero spacing
    """
    aff = _as_affine(affine)
    dims = tuple(int(d) for d in dims)
    if len(dims) != 3 or min(dims) < 1:
        raise InvalidHeader(f"Voxel grid dimensions must be three positive ints, got {dims}")
    if len(pixdims) != 3 or not all(math.isfinite(p) and p != 0 for p in pixdims):
        raise InvalidHeader(f"Voxel spacing must be three non-zero values, got {tuple(pixdims)}")

    rotation = aff[:, :3]
    if not np.any(rotation):
        raise InvalidHeader("Affine rotation/scale block is all zero")
    if np.linalg.matrix_rank(rotation) < 3:
        raise InvalidHeader("Affine rotation/scale block is singular")

    perm = [0, 0, 0]
    flip = [False, False, False]
    used = [False, False, False]
    for ras_axis in range(3):
        best_val = 0.0
        best_vox = -1
        for voxel_axis in range(3):
            if used[voxel_axis]:
                continue
            val = abs(rotation[ras_axis, voxel_axis])
            if val > best_val:
                best_val = val
                best_vox = voxel_axis
        if best_vox < 0:
            # Every remaining coefficient is zero; keep perm a bijection
            best_vox = used.index(False)
            logger.warning(
                f"No remaining voxel axis projects onto world axis {RAS_AXES[ras_axis]}, "
                f"assigning voxel axis {best_vox}"
            )
        perm[ras_axis] = best_vox
        flip[ras_axis] = bool(rotation[ras_axis, best_vox] < 0)
        used[best_vox] = True

        row_norm = float(np.linalg.norm(rotation[ras_axis]))
        if row_norm and best_val < 0.9 * row_norm:
            logger.debug(
                f"World axis {RAS_AXES[ras_axis]} is oblique: voxel axis {best_vox} "
                f"carries {best_val / row_norm:.2f} of the row norm"
            )

    ras_size = tuple(dims[perm[r]] for r in range(3))
    spacing = tuple(abs(float(pixdims[perm[r]])) for r in range(3))

    # Original voxel index that lands on reoriented voxel (0, 0, 0)
    ijk0 = np.zeros(3)
    for ras_axis in range(3):
        voxel_axis = perm[ras_axis]
        ijk0[voxel_axis] = dims[voxel_axis] - 1 if flip[ras_axis] else 0
    origin = rotation @ ijk0 + aff[:, 3]

    orientation = Orientation(
        perm=tuple(perm),
        flip=tuple(flip),
        ras_size=ras_size,
        voxel_spacing_ras=spacing,
        ras_origin=tuple(float(v) for v in origin),
    )
    logger.debug(
        f"Resolved orientation {''.join(orientation.axcodes)}: perm={orientation.perm}, "
        f"flip={orientation.flip}, size={ras_size}"
    )
    return orientation


def resolve_volume_orientation(volume) -> Orientation:
    """Resolve the orientation of a loaded VolumeData."""
    return resolve_orientation(volume.affine, volume.dims, volume.pixdims)


def _check_axis(ras_axis: int) -> None:
    if ras_axis not in (0, 1, 2):
        raise ValueError(f"RAS axis must be 0, 1 or 2, got {ras_axis}")


def voxel_to_mm(orientation: Orientation, ras_axis: int, voxel_index: int) -> float:
    """
    Convert a slice index along a RAS axis to display millimetres.

    The R axis is negated so values read Left-positive; A and S pass through.
    """
    _check_axis(ras_axis)
    ras = orientation.ras_origin[ras_axis] + voxel_index * orientation.voxel_spacing_ras[ras_axis]
    return -ras if ras_axis == 0 else ras


def mm_to_voxel(orientation: Orientation, ras_axis: int, mm: float) -> int:
    """Convert display millimetres back to the nearest in-range slice index."""
    _check_axis(ras_axis)
    ras_mm = -mm if ras_axis == 0 else mm
    last = orientation.ras_size[ras_axis] - 1
    pos = (ras_mm - orientation.ras_origin[ras_axis]) / orientation.voxel_spacing_ras[ras_axis]
    if not math.isfinite(pos):
        return 0 if pos < 0 or math.isnan(pos) else last
    idx = math.floor(pos + 0.5)
    return max(0, min(last, idx))


def slice_mm_range(orientation: Orientation, ras_axis: int) -> Tuple[float, float, float]:
    """Return (mm_min, mm_max, mm_step) spanned by the slices along a RAS axis."""
    mm_a = voxel_to_mm(orientation, ras_axis, 0)
    mm_b = voxel_to_mm(orientation, ras_axis, orientation.ras_size[ras_axis] - 1)
    return min(mm_a, mm_b), max(mm_a, mm_b), orientation.voxel_spacing_ras[ras_axis]
