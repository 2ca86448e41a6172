"""
Gemini API integration for waste object detection.
"""

import json
import logging
from typing import Optional

from google.genai import types

from wastesnap import config
from wastesnap.errors import UpstreamFailure

logger = logging.getLogger(__name__)


def build_detection_prompt() -> str:
    """
    Build the object-detection prompt for Gemini.

    Returns:
        Prompt asking for a JSON array of objects with box_2d on a 0-1000 grid
    """
    return """Detect every piece of waste or disposable item in this image.

For each object, classify it for disposal:
- recyclable: plastic bottles, cans, glass, paper, cardboard
- compostable: food scraps, plant matter, uncoated paper products
- non_recyclable: everything that belongs in landfill

Respond with ONLY a valid JSON array, one element per object:
[
    {
        "label": "<short name, e.g. plastic bottle>",
        "box_2d": [<ymin>, <xmin>, <ymax>, <xmax>],
        "confidence": <number between 0 and 1>,
        "category": "recyclable" | "compostable" | "non_recyclable",
        "description": "<one sentence describing the object>",
        "is_trash": <true | false>
    }
]

box_2d coordinates are integers normalized to 0-1000 relative to the full image, origin top-left.
Return [] if no objects are found.
"""


# Sample objects served when running without a Gemini API key
SAMPLE_DETECTIONS = [
    {"label": "plastic bottle", "box_2d": [250, 150, 450, 230], "confidence": 0.94,
     "category": "recyclable", "description": "Clear plastic water bottle with cap"},
    {"label": "aluminum can", "box_2d": [300, 350, 420, 410], "confidence": 0.89,
     "category": "recyclable", "description": "Red aluminum soda can"},
    {"label": "paper cup", "box_2d": [400, 550, 550, 650], "confidence": 0.82,
     "category": "compostable", "description": "White paper coffee cup with lid"},
    {"label": "glass bottle", "box_2d": [200, 750, 380, 820], "confidence": 0.91,
     "category": "recyclable", "description": "Green glass beer bottle"},
    {"label": "plastic bag", "box_2d": [600, 250, 720, 450], "confidence": 0.76,
     "category": "landfill", "description": "White plastic shopping bag"},
    {"label": "cardboard box", "box_2d": [650, 600, 750, 750], "confidence": 0.88,
     "category": "recyclable", "description": "Brown cardboard shipping box"},
]


def mock_detection_response() -> str:
    """Canned Gemini-style response, wrapped in a code block like the real model."""
    return "```json\n" + json.dumps(SAMPLE_DETECTIONS, indent=2) + "\n```"


def detect_objects(image_bytes: bytes, mime_type: str, prompt: Optional[str] = None) -> str:
    """
    Send an image to Gemini and return the raw response text.

    Args:
        image_bytes: Raw bytes of the uploaded image
        mime_type: MIME type of the image (e.g. image/jpeg)
        prompt: Optional prompt override

    Returns:
        Raw text emitted by the model

    Raises:
        UpstreamFailure: If the client is not configured or the call fails
    """
    client = config.gemini_client
    if not client:
        if config.MOCK_DETECTIONS:
            logger.warning("Gemini client not configured, serving sample detections")
            return mock_detection_response()
        raise UpstreamFailure("Gemini client is not configured")

    try:
        parts = [
            types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
            types.Part.from_text(text=prompt or build_detection_prompt()),
        ]
        response = client.models.generate_content(
            model=config.GEMINI_MODEL,
            contents=parts,
        )

        # Extract text response
        response_text = ""
        for part in response.parts or []:
            if part.text:
                response_text += part.text
    except Exception as e:
        logger.error(f"Error calling Gemini API: {e}", exc_info=True)
        raise UpstreamFailure(f"Gemini request failed: {e}") from e

    logger.debug(f"Gemini returned {len(response_text)} characters")
    return response_text
