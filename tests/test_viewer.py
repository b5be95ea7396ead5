import numpy as np
import pytest

from triview.exceptions import LoadError, InvalidHeader
from triview.data_io.nifti_loader import make_volume
from triview.views.planes import ViewPlane
from triview.viewer import TriplanarViewer

from conftest import PERMUTED_AFFINE, ramp_array


def test_load_file_sets_up_every_view(nifti_file):
    viewer = TriplanarViewer()
    volume = viewer.load_file(nifti_file(ramp_array((5, 6, 7)), PERMUTED_AFFINE))
    assert viewer.has_volume
    assert viewer.volume is volume
    assert viewer.orientation.ras_size == (6, 7, 5)
    assert viewer.view(ViewPlane.AXIAL).slice_index == 2
    assert viewer.view("coronal").slice_index == 3
    assert viewer.view(ViewPlane.SAGITTAL).slice_index == 3


def test_load_bytes(nifti_bytes):
    viewer = TriplanarViewer()
    volume = viewer.load_bytes(nifti_bytes(ramp_array((3, 3, 3))), name="/tmp/head.nii")
    assert volume.source == "head.nii"


def test_failed_load_keeps_previous_volume(nifti_file, tmp_path):
    viewer = TriplanarViewer()
    volume = viewer.load_file(nifti_file(ramp_array((3, 4, 5))))
    viewer.view(ViewPlane.AXIAL).set_slice(4)
    with pytest.raises(LoadError):
        viewer.load_file(str(tmp_path / "missing.nii.gz"))
    with pytest.raises(LoadError):
        viewer.load_bytes(b"garbage")
    assert viewer.volume is volume
    assert viewer.view(ViewPlane.AXIAL).slice_index == 4


def test_degenerate_affine_rejected_before_views_change(constant_volume):
    viewer = TriplanarViewer()
    viewer.set_volume(constant_volume)
    bad = make_volume(np.zeros((2, 2, 2), dtype=np.int16), np.zeros((4, 4)), (1, 1, 1))
    with pytest.raises(InvalidHeader):
        viewer.set_volume(bad)
    assert viewer.volume is constant_volume
    assert viewer.view(ViewPlane.CORONAL).volume is constant_volume


def test_display_parameters_are_validated():
    viewer = TriplanarViewer()
    viewer.set_contrast(2.5)
    viewer.set_brightness(-20)
    assert viewer.display.contrast == 2.5
    assert viewer.display.brightness == -20
    with pytest.raises(ValueError):
        viewer.set_contrast(0)
    with pytest.raises(ValueError):
        viewer.set_brightness(500)
    assert viewer.display.contrast == 2.5


def test_render_all_parallel_matches_serial(permuted_volume):
    viewer = TriplanarViewer()
    viewer.set_volume(permuted_volume)
    viewer.set_contrast(1.4)
    viewer.set_brightness(8)
    parallel = viewer.render_all((96, 64))
    serial = viewer.render_all((96, 64), parallel=False)
    assert list(parallel) == list(ViewPlane)
    for plane in ViewPlane:
        assert parallel[plane].tobytes() == serial[plane].tobytes()
        assert np.array_equal(parallel[plane], viewer.render(plane, (96, 64)))


def test_contrast_change_reaches_every_view(constant_volume):
    viewer = TriplanarViewer()
    viewer.set_volume(constant_volume)
    viewer.set_brightness(-55)
    images = viewer.render_all((8, 8))
    for image in images.values():
        assert np.all(image[..., 0] == 200)


def test_unload(constant_volume):
    viewer = TriplanarViewer()
    viewer.set_volume(constant_volume)
    viewer.unload()
    assert not viewer.has_volume
    assert all(not view.has_volume for view in viewer.views.values())
