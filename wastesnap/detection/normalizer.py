"""
Normalization of Gemini object-detection output into DetectionRecords.

Gemini sometimes splits one object across several array entries, each
carrying a few of the fields. Those fragments are merged on their box_2d
before geometry, confidence, category and trash flag are repaired.
"""

import json
import logging
import math
from typing import Dict, List

from wastesnap.detection.categories import classify, derive_is_trash
from wastesnap.image_processing.bounding_box import normalize_bounding_box
from wastesnap.models import DetectionRecord
from wastesnap.utils.parsing import parse_gemini_json_array

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.5

# Fragments with this many populated fields or fewer trigger a merge
FRAGMENT_FIELD_THRESHOLD = 3


def populated_field_count(fragment: Dict) -> int:
    return sum(1 for value in fragment.values() if value is not None)


def needs_merge(fragments: List[Dict]) -> bool:
    return any(populated_field_count(f) <= FRAGMENT_FIELD_THRESHOLD for f in fragments)


def _merge_key(box_2d) -> str:
    return json.dumps(box_2d, sort_keys=True)


def merge_fragments(fragments: List[Dict]) -> List[Dict]:
    """
    Merge fragments that share the same box_2d.

    Later non-null fields overwrite earlier ones. Groups keep the order in
    which their box_2d was first seen. Fragments with a missing or null box_2d
    are dropped.
    """
    merged: Dict[str, Dict] = {}
    for fragment in fragments:
        if fragment.get("box_2d") is None:
            logger.debug(f"Dropping fragment without box_2d: {fragment!r}")
            continue
        key = _merge_key(fragment["box_2d"])
        target = merged.setdefault(key, {"box_2d": fragment["box_2d"]})
        for field, value in fragment.items():
            if field != "box_2d" and value is not None:
                target[field] = value
    return list(merged.values())


def coerce_confidence(value) -> float:
    """
    Coerce a raw confidence into a float.

    Numeric strings are parsed; missing, non-numeric, NaN or infinite values
    become 0.5; values above 1 are read as percentages. No clamp is applied beyond that.
    """
    if isinstance(value, bool) or value is None:
        return DEFAULT_CONFIDENCE
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return DEFAULT_CONFIDENCE
    if not isinstance(value, (int, float)):
        return DEFAULT_CONFIDENCE

    try:
        confidence = float(value)
    except OverflowError:
        return DEFAULT_CONFIDENCE
    if not math.isfinite(confidence):
        return DEFAULT_CONFIDENCE
    if confidence > 1:
        confidence = confidence / 100
    return confidence


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def normalize_fragment(fragment: Dict) -> DetectionRecord:
    """Repair a single (possibly merged) fragment into a DetectionRecord."""
    label = _text(fragment.get("label"))
    description = _text(fragment.get("description"))
    geometry = normalize_bounding_box(fragment.get("box_2d"))
    category = classify(fragment.get("category"), label, description)

    return DetectionRecord(
        label=label,
        confidence=coerce_confidence(fragment.get("confidence")),
        category=category,
        description=description,
        is_trash=derive_is_trash(fragment.get("is_trash"), category, label, description),
        **geometry,
    )


def normalize(raw_text: str) -> List[DetectionRecord]:
    """
    Normalize raw Gemini output into an ordered list of detections.

    Args:
        raw_text: Text returned by the model, optionally wrapped in a code block

    Returns:
        List of DetectionRecord in first-seen order

    Raises:
        MalformedResponse: If the text is not a JSON array
    """
    fragments = [f if isinstance(f, dict) else {} for f in parse_gemini_json_array(raw_text)]

    if needs_merge(fragments):
        merged = merge_fragments(fragments)
        logger.info(f"Merged {len(fragments)} fragments into {len(merged)} detections")
        fragments = merged

    return [normalize_fragment(fragment) for fragment in fragments]
