"""
NIfTI loading functionality.

Turns a NIfTI-1/NIfTI-2 container (file or bytes, optionally gzipped) into
a VolumeData: header geometry plus a flat, read-only voxel buffer and the
volume's global intensity range.
"""

import gzip
import os
import logging
import warnings
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
import nibabel as nib

from ..config import (
    SUPPORTED_DATATYPES, NIFTI1_HEADER_SIZE, NIFTI2_HEADER_SIZE, GZIP_MAGIC,
)
from ..exceptions import LoadError, InvalidHeader, UnsupportedDatatype

logger = logging.getLogger(__name__)

_DATATYPE_BY_DTYPE = {name: code for code, name in SUPPORTED_DATATYPES.items()}


@dataclass(frozen=True, eq=False)
class VolumeData:
    """
    A loaded volume.

    Attributes:
        dims: voxel grid extents (i, j, k)
        pixdims: voxel spacing (i, j, k) in mm
        affine: 4x4 voxel-to-world matrix
        datatype: NIfTI datatype code of the voxel buffer
        voxel_buffer: flat samples, i fastest, then j, then k
        global_min, global_max: intensity range over the whole buffer
        source: file name or label the volume came from
    """
    dims: Tuple[int, int, int]
    pixdims: Tuple[float, float, float]
    affine: np.ndarray
    datatype: int
    voxel_buffer: np.ndarray
    global_min: float
    global_max: float
    source: str = "<memory>"

    def as_array(self) -> np.ndarray:
        """Read-only (i, j, k) view of the voxel buffer."""
        return self.voxel_buffer.reshape(self.dims, order='F')


def scan_intensity_range(buffer: np.ndarray) -> Tuple[float, float]:
    """Global (min, max) of a voxel buffer, ignoring NaN. All-NaN gives (0, 0)."""
    if buffer.dtype.kind != 'f':
        return float(buffer.min()), float(buffer.max())
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        lo = np.nanmin(buffer)
        hi = np.nanmax(buffer)
    if np.isnan(lo):
        return 0.0, 0.0
    return float(lo), float(hi)


def _datatype_for(dtype: np.dtype, datatype: Optional[int]) -> int:
    if datatype is not None:
        if datatype not in SUPPORTED_DATATYPES:
            raise UnsupportedDatatype(f"Unsupported NIfTI datatype code {datatype}")
        return int(datatype)
    code = _DATATYPE_BY_DTYPE.get(np.dtype(dtype).name)
    if code is None:
        raise UnsupportedDatatype(f"Unsupported voxel dtype {np.dtype(dtype)}")
    return code


def make_volume(voxels, affine, pixdims: Sequence[float],
                dims: Optional[Sequence[int]] = None,
                datatype: Optional[int] = None,
                source: str = "<memory>",
                copy: bool = True) -> VolumeData:
    """
    Build a VolumeData from an in-memory voxel array.

    Args:
        voxels: 3D array indexed (i, j, k), or a flat buffer with dims given
        affine: 4x4 or 3x4 voxel-to-world matrix
        pixdims: voxel spacing (i, j, k)
        dims: grid extents, required for a flat buffer
        datatype: NIfTI datatype code; inferred from the array dtype if omitted
        source: label for logs and exports
        copy: copy the samples so later writes to `voxels` cannot leak in

    Raises:
        InvalidHeader: missing buffer, inconsistent dims/length or affine shape
        UnsupportedDatatype: dtype with no supported NIfTI code
    """
    if voxels is None:
        raise InvalidHeader("No voxel buffer")
    arr = np.asarray(voxels)

    if arr.ndim == 3:
        if dims is not None and tuple(int(d) for d in dims) != arr.shape:
            raise InvalidHeader(f"Header dims {tuple(dims)} do not match voxel array {arr.shape}")
        dims = arr.shape
        flat = arr.ravel(order='F')
    elif arr.ndim == 1:
        if dims is None:
            raise InvalidHeader("A flat voxel buffer needs explicit dims")
        flat = arr
    else:
        raise InvalidHeader(f"Voxel buffer must be 1D or 3D, got {arr.ndim}D")

    dims = tuple(int(d) for d in dims)
    if len(dims) != 3 or min(dims) < 1:
        raise InvalidHeader(f"Voxel grid dimensions must be three positive ints, got {dims}")
    expected = dims[0] * dims[1] * dims[2]
    if flat.size != expected:
        raise InvalidHeader(f"Voxel buffer has {flat.size} samples, header dims {dims} need {expected}")

    pixdims = tuple(float(p) for p in pixdims)
    if len(pixdims) != 3:
        raise InvalidHeader(f"Expected three voxel spacings, got {pixdims}")

    aff = np.asarray(affine, dtype=np.float64)
    if aff.shape == (3, 4):
        aff = np.vstack([aff, [0.0, 0.0, 0.0, 1.0]])
    elif aff.shape != (4, 4):
        raise InvalidHeader(f"Affine must be 3x4 or 4x4, got shape {aff.shape}")
    else:
        aff = aff.copy()
    aff.setflags(write=False)

    code = _datatype_for(flat.dtype, datatype)

    if copy or not flat.flags.c_contiguous:
        flat = np.array(flat, copy=True, order='C')
    flat.setflags(write=False)

    global_min, global_max = scan_intensity_range(flat)
    return VolumeData(
        dims=dims,
        pixdims=pixdims,
        affine=aff,
        datatype=code,
        voxel_buffer=flat,
        global_min=global_min,
        global_max=global_max,
        source=source,
    )


def _volume_from_image(img, source: str) -> VolumeData:
    code = int(img.header['datatype'])
    if code not in SUPPORTED_DATATYPES:
        raise UnsupportedDatatype(f"{source}: unsupported NIfTI datatype code {code}")

    arr = np.asanyarray(img.dataobj)
    if arr.ndim > 3:
        logger.warning(f"{source}: {arr.ndim}D image {arr.shape}, displaying the first volume only")
        arr = arr[(slice(None),) * 3 + (0,) * (arr.ndim - 3)]
    while arr.ndim < 3:
        arr = arr[..., np.newaxis]

    zooms = tuple(img.header.get_zooms()[:3])
    zooms = zooms + (1.0,) * (3 - len(zooms))

    # Scaled data may come back as float64 even for integer storage codes
    datatype = code if arr.dtype == np.dtype(SUPPORTED_DATATYPES[code]) else None
    return make_volume(arr, img.affine, zooms, datatype=datatype, source=source, copy=False)


def _image_class_for(data: bytes):
    if len(data) < 4:
        raise LoadError("Data too short to hold a NIfTI header")
    for byteorder in ('little', 'big'):
        size = int.from_bytes(data[:4], byteorder)
        if size == NIFTI1_HEADER_SIZE:
            return nib.Nifti1Image
        if size == NIFTI2_HEADER_SIZE:
            return nib.Nifti2Image
    raise LoadError("Not a NIfTI-1 or NIfTI-2 header")


def load_volume(data: bytes, source: str = "<memory>") -> VolumeData:
    """
    Load a volume from the bytes of a .nii or .nii.gz file.

    Raises:
        LoadError: data is not a readable NIfTI container
        InvalidHeader: header inconsistent with the voxel data
        UnsupportedDatatype: voxel type not supported
    """
    try:
        if data[:2] == GZIP_MAGIC:
            data = gzip.decompress(data)
        image_class = _image_class_for(data)
        img = image_class.from_bytes(data)
        volume = _volume_from_image(img, source)
    except LoadError as e:
        logger.error(f"NIfTI loading error: {e}")
        raise
    except Exception as e:
        logger.error(f"NIfTI loading error: {e}")
        raise LoadError(f"{source}: {e}") from e

    logger.info(f"Loaded NIfTI volume {source}. Shape: {volume.dims}, "
                f"range: [{volume.global_min}, {volume.global_max}]")
    return volume


def load_nifti_file(file_path: str) -> VolumeData:
    """
    Load a NIfTI file (.nii or .nii.gz) from disk.

    Args:
        file_path: Path to NIfTI file

    Returns:
        VolumeData for the file
    """
    source = os.path.basename(file_path)
    try:
        img = nib.load(file_path)
        if not isinstance(img, (nib.Nifti1Image, nib.Nifti2Image)):
            raise LoadError(f"{source}: not a NIfTI image ({type(img).__name__})")
        volume = _volume_from_image(img, source)
    except LoadError as e:
        logger.error(f"NIfTI loading error: {e}")
        raise
    except Exception as e:
        logger.error(f"NIfTI loading error: {e}")
        raise LoadError(f"{source}: {e}") from e

    logger.info(f"Loaded NIfTI file {source}. Shape: {volume.dims}, "
                f"range: [{volume.global_min}, {volume.global_max}]")
    return volume
