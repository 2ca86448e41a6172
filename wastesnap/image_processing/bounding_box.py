"""
Bounding box conversion utilities.
"""

import logging
import math
from typing import Dict

logger = logging.getLogger(__name__)

# Gemini reports box_2d as [ymin, xmin, ymax, xmax] on a 0-1000 grid
BOX_2D_SCALE = 1000.0

ZERO_BOX = {"x": 0.0, "y": 0.0, "width": 0.0, "height": 0.0}


def _coordinate(value) -> float:
    if isinstance(value, bool):
        raise ValueError("boolean is not a coordinate")
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        raise ValueError("coordinate is not finite")
    return number


def normalize_bounding_box(box_2d) -> Dict[str, float]:
    """
    Convert a Gemini box_2d into a normalized bounding box.

    Args:
        box_2d: [ymin, xmin, ymax, xmax] on the 0-1000 scale

    Returns:
        Dict with x, y, width, height as fractions of the full image.
        A missing or malformed box yields a zero box.
    """
    if not isinstance(box_2d, (list, tuple)) or len(box_2d) != 4:
        logger.debug(f"Unusable box_2d {box_2d!r}, using zero geometry")
        return dict(ZERO_BOX)

    try:
        ymin, xmin, ymax, xmax = (_coordinate(v) for v in box_2d)
    except (TypeError, ValueError):
        logger.debug(f"Non-numeric box_2d {box_2d!r}, using zero geometry")
        return dict(ZERO_BOX)

    # x + width <= 1 is not enforced
    return {
        "x": xmin / BOX_2D_SCALE,
        "y": ymin / BOX_2D_SCALE,
        "width": (xmax - xmin) / BOX_2D_SCALE,
        "height": (ymax - ymin) / BOX_2D_SCALE,
    }


def to_pixel_box(detection, image_width: int, image_height: int) -> Dict[str, int]:
    """
    Scale a normalized detection box to pixel coordinates, clamped to the image.

    Args:
        detection: Object with x, y, width, height attributes (0-1)
        image_width: Image width in pixels
        image_height: Image height in pixels

    Returns:
        Dict with left, top, right, bottom in pixels
    """
    left = int(round(detection.x * image_width))
    top = int(round(detection.y * image_height))
    right = int(round((detection.x + detection.width) * image_width))
    bottom = int(round((detection.y + detection.height) * image_height))

    # Clamp to image bounds
    left = max(0, min(left, image_width - 1))
    top = max(0, min(top, image_height - 1))
    right = max(left, min(right, image_width - 1))
    bottom = max(top, min(bottom, image_height - 1))

    return {"left": left, "top": top, "right": right, "bottom": bottom}
