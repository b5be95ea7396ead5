import os

import numpy as np
from matplotlib import image as mpimg

from triview.data_io.export import export_views
from triview.run_viewer import main, parse_size

from conftest import ramp_array


def test_export_views_writes_png(tmp_path):
    image = np.zeros((10, 20, 4), dtype=np.uint8)
    image[..., 0] = 255
    image[..., 3] = 255
    out_dir = tmp_path / "out"
    files = export_views({"axial": image}, str(out_dir), prefix="case1_")
    assert files == ["case1_axial.png"]
    written = mpimg.imread(str(out_dir / "case1_axial.png"))
    assert written.shape[:2] == (10, 20)
    assert np.allclose(written[..., 0], 1.0)


def test_parse_size():
    assert parse_size("640x480") == (640, 480)


def test_cli_renders_three_views(nifti_file, tmp_path):
    path = nifti_file(ramp_array((8, 10, 12)))
    out_dir = tmp_path / "renders"
    code = main([path, "-o", str(out_dir), "--size", "64x48", "--axial", "3", "--contrast", "1.5"])
    assert code == 0
    assert sorted(os.listdir(out_dir)) == ["axial.png", "coronal.png", "sagittal.png"]
    axial = mpimg.imread(str(out_dir / "axial.png"))
    assert axial.shape[0] <= 48 and axial.shape[1] <= 64


def test_cli_missing_file(tmp_path):
    assert main([str(tmp_path / "nope.nii"), "-o", str(tmp_path)]) == 1


def test_cli_bad_contrast(nifti_file, tmp_path):
    path = nifti_file(ramp_array((4, 4, 4)))
    assert main([path, "-o", str(tmp_path / "x"), "--contrast", "10"]) == 2
