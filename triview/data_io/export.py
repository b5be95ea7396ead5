"""
Export functionality for rendered views.
"""

import os
import logging
from typing import Dict, List

import numpy as np
from matplotlib import image as mpimg

from ..config import EXPORT_FORMAT

logger = logging.getLogger(__name__)


def export_views(images: Dict[str, np.ndarray], output_dir: str, prefix: str = "") -> List[str]:
    """
    Write rendered RGBA views to image files.

    Args:
        images: view name -> uint8 (height, width, 4) image
        output_dir: Directory to write into (created if missing)
        prefix: Optional file name prefix

    Returns:
        List of created filenames
    """
    try:
        os.makedirs(output_dir, exist_ok=True)
        files_created = []
        for name, image in images.items():
            filename = os.path.join(output_dir, f"{prefix}{name}.{EXPORT_FORMAT}")
            mpimg.imsave(filename, np.ascontiguousarray(image), format=EXPORT_FORMAT)
            files_created.append(os.path.basename(filename))

        logger.info(f"Exported {len(files_created)} views to {output_dir}")
        return files_created

    except Exception as e:
        logger.error(f"Export error: {e}")
        raise
