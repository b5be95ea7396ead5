import numpy as np
import nibabel as nib
import pytest

from triview.data_io.nifti_loader import make_volume


def ramp_array(dims, dtype=np.float32):
    """(i, j, k) array whose value is its own flat buffer offset."""
    i, j, k = np.meshgrid(*(np.arange(d) for d in dims), indexing='ij')
    return (i + j * dims[0] + k * dims[0] * dims[1]).astype(dtype)


def spacing_affine(spacing, signs=(1, 1, 1), translation=(0, 0, 0)):
    aff = np.diag([s * sign for s, sign in zip(spacing, signs)] + [1.0])
    aff[:3, 3] = translation
    return aff


# Stored axis order i -> S, j -> L, k -> A
PERMUTED_AFFINE = np.array([
    [0.0, -2.0, 0.0, 30.0],
    [0.0, 0.0, 1.5, -12.0],
    [1.0, 0.0, 0.0, 4.0],
    [0.0, 0.0, 0.0, 1.0],
])


@pytest.fixture
def ramp_volume():
    dims = (5, 6, 7)
    return make_volume(ramp_array(dims), spacing_affine((1.0, 1.0, 1.0)), (1.0, 1.0, 1.0))


@pytest.fixture
def permuted_volume():
    dims = (5, 6, 7)
    return make_volume(ramp_array(dims), PERMUTED_AFFINE, (1.0, 2.0, 1.5), source="permuted.nii")


@pytest.fixture
def constant_volume():
    return make_volume(np.full((4, 4, 4), 7, dtype=np.int16), np.eye(4), (1.0, 1.0, 1.0))


@pytest.fixture
def nifti_bytes():
    def _make(arr, affine=None, image_class=nib.Nifti1Image):
        img = image_class(arr, np.eye(4) if affine is None else affine)
        return img.to_bytes()
    return _make


@pytest.fixture
def nifti_file(tmp_path):
    def _make(arr, affine=None, name="volume.nii.gz"):
        path = tmp_path / name
        nib.save(nib.Nifti1Image(arr, np.eye(4) if affine is None else affine), str(path))
        return str(path)
    return _make
