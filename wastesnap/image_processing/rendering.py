"""
Drawing detection boxes over images.
"""

import io
from typing import Dict, List

from PIL import Image, ImageDraw, ImageFont

from wastesnap.image_processing.bounding_box import to_pixel_box
from wastesnap.models import Category, DetectionRecord

CATEGORY_COLORS: Dict[Category, str] = {
    Category.RECYCLABLE: "#22c55e",
    Category.COMPOSTABLE: "#f59e0b",
    Category.NON_RECYCLABLE: "#ef4444",
}


def draw_detections(image: Image.Image, detections: List[DetectionRecord]) -> Image.Image:
    """
    Draw labeled bounding boxes on a copy of the image using Pillow.

    Args:
        image: Source image
        detections: Normalized detections to draw

    Returns:
        New RGB image with boxes and labels
    """
    canvas = image.convert("RGB")
    draw = ImageDraw.Draw(canvas)
    font = ImageFont.load_default()
    width, height = canvas.size
    line_width = max(2, min(width, height) // 200)

    for detection in detections:
        color = CATEGORY_COLORS[detection.category]
        box = to_pixel_box(detection, width, height)
        draw.rectangle(
            (box["left"], box["top"], box["right"], box["bottom"]),
            outline=color,
            width=line_width,
        )

        caption = f"{detection.label or 'object'} ({detection.confidence * 100:.0f}%)"
        text_left, text_top, text_right, text_bottom = draw.textbbox((0, 0), caption, font=font)
        text_height = text_bottom - text_top
        # Place caption above the box, or inside it when there is no room
        caption_top = box["top"] - text_height - 4 if box["top"] >= text_height + 4 else box["top"]
        draw.rectangle(
            (box["left"], caption_top, box["left"] + (text_right - text_left) + 4, caption_top + text_height + 4),
            fill=color,
        )
        draw.text((box["left"] + 2, caption_top + 2 - text_top), caption, fill="white", font=font)

    return canvas


def render_detections_png(image_bytes: bytes, detections: List[DetectionRecord]) -> bytes:
    """Decode image bytes, draw the detections and encode the result as PNG."""
    img = Image.open(io.BytesIO(image_bytes))
    rendered = draw_detections(img, detections)
    output = io.BytesIO()
    rendered.save(output, format="PNG")
    return output.getvalue()
