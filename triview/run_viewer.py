#!/usr/bin/env python3
"""
Command line launcher: load a NIfTI volume and export its three views.
"""

import sys
import logging
import argparse

from .config import (
    DEFAULT_CONTRAST, DEFAULT_BRIGHTNESS, DEFAULT_OUTPUT_DIR, DEFAULT_RENDER_SIZE, LOG_FORMAT,
)
from .data_io.export import export_views
from .exceptions import LoadError
from .viewer import TriplanarViewer
from .views.planes import ViewPlane

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )


def parse_size(text: str):
    try:
        width, height = (int(v) for v in text.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"size must look like WIDTHxHEIGHT, got {text!r}")
    if width < 1 or height < 1:
        raise argparse.ArgumentTypeError(f"size must be positive, got {text!r}")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="triview-render",
        description="Render axial, coronal and sagittal slices of a NIfTI volume to PNG.",
    )
    parser.add_argument("file", help=".nii or .nii.gz file")
    parser.add_argument("-o", "--output-dir", default=DEFAULT_OUTPUT_DIR)
    parser.add_argument("--size", type=parse_size, default=DEFAULT_RENDER_SIZE,
                        help="display surface per view, WIDTHxHEIGHT (default %(default)s)")
    parser.add_argument("--contrast", type=float, default=DEFAULT_CONTRAST)
    parser.add_argument("--brightness", type=float, default=DEFAULT_BRIGHTNESS)
    for plane in ViewPlane:
        parser.add_argument(f"--{plane.value}", type=float, metavar="MM",
                            help=f"{plane.title} slice position in mm (default: centre)")
    parser.add_argument("--prefix", default="")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None) -> int:
    """Main entry point for the renderer."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    viewer = TriplanarViewer()
    try:
        viewer.load_file(args.file)
    except LoadError:
        return 1

    try:
        viewer.set_contrast(args.contrast)
        viewer.set_brightness(args.brightness)
    except ValueError as e:
        logger.error(str(e))
        return 2

    for plane in ViewPlane:
        mm = getattr(args, plane.value)
        if mm is not None:
            viewer.view(plane).set_slice_mm(mm)
        logger.info(f"{viewer.view(plane).label} (slice {viewer.view(plane).index_label})")

    images = viewer.render_all(args.size)
    export_views({plane.value: image for plane, image in images.items()},
                 args.output_dir, prefix=args.prefix)
    return 0


if __name__ == "__main__":
    sys.exit(main())
