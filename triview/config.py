"""
Configuration constants and settings for the tri-planar NIfTI viewer.
"""

# Intensity transfer table
LUT_SIZE = 256
LUT_CENTER = 128
NORMALIZED_MAX = 255  # full scale of a normalised sample

# Display parameter defaults and the ranges the controls expose
DEFAULT_CONTRAST = 1.0
DEFAULT_BRIGHTNESS = 0.0
CONTRAST_RANGE = (0.1, 3.0)
BRIGHTNESS_RANGE = (-128.0, 128.0)

# Mouse wheel delta per slice step
SCROLL_STEP = 30

# Spline order used when scaling a slice to the display surface (3 = cubic)
RESAMPLE_ORDER = 3

# Default surface size (width, height) for off-screen rendering
DEFAULT_RENDER_SIZE = (512, 512)

# NIfTI header sizes used to tell NIfTI-1 from NIfTI-2
NIFTI1_HEADER_SIZE = 348
NIFTI2_HEADER_SIZE = 540
GZIP_MAGIC = b"\x1f\x8b"

# NIfTI datatype codes the loader accepts, with their numpy dtype names
SUPPORTED_DATATYPES = {
    2: "uint8",
    4: "int16",
    8: "int32",
    16: "float32",
    64: "float64",
    256: "int8",
    512: "uint16",
    768: "uint32",
}

# Export defaults
DEFAULT_OUTPUT_DIR = "renders"
EXPORT_FORMAT = "png"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
