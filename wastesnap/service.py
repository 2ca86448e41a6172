"""
Image analysis flow: hash, history lookup, Gemini detection, normalization.
"""

import logging
import time
from typing import Callable, Dict, Optional

from wastesnap.detection.normalizer import normalize
from wastesnap.detection.summary import build_analysis_result
from wastesnap.errors import MissingInput
from wastesnap.history.cache import ResultCache
from wastesnap.models import AnalysisResult, HistoryEntry
from wastesnap.utils.hashing import hash_image_bytes, to_data_url

logger = logging.getLogger(__name__)

# (image_bytes, mime_type) -> raw model text
Detector = Callable[[bytes, str], str]


def build_response(image_hash: str, result: AnalysisResult, cached: bool) -> Dict:
    payload = result.model_dump(mode="json")
    return {
        "success": True,
        "hash": image_hash,
        "cached": cached,
        "detections": payload["detections"],
        "summary": payload["summary"],
        "recommendations": payload["recommendations"],
    }


def analyze_upload(
    image_bytes: Optional[bytes],
    mime_type: str,
    cache: ResultCache,
    detector: Detector,
) -> Dict:
    """
    Analyze an uploaded image, serving repeated uploads from the history cache.

    Args:
        image_bytes: Raw bytes of the uploaded image
        mime_type: MIME type of the image
        cache: Upload history cache
        detector: Vision model call returning raw text

    Returns:
        Response payload with detections, summary and recommendations

    Raises:
        MissingInput: If no image bytes were provided
        UpstreamFailure: If the vision model call fails
        MalformedResponse: If the model output is not a JSON array
    """
    if not image_bytes:
        raise MissingInput("No image provided")

    image_hash = hash_image_bytes(image_bytes)
    cached = cache.get(image_hash)
    if cached is not None:
        logger.info(f"History hit for {image_hash[:12]}")
        return build_response(image_hash, cached.result, cached=True)

    logger.info(f"History miss for {image_hash[:12]}, calling Gemini")
    raw_text = detector(image_bytes, mime_type)
    detections = normalize(raw_text)
    result = build_analysis_result(detections)

    cache.put(HistoryEntry(
        hash=image_hash,
        image_data_url=to_data_url(image_bytes, mime_type),
        result=result,
        timestamp=int(time.time() * 1000),
    ))
    return build_response(image_hash, result, cached=False)
