"""
Per-category counts and disposal recommendations for a set of detections.
"""

from typing import List

from wastesnap.models import AnalysisResult, Category, CategorySummary, DetectionRecord

# How many item names to spell out per recommendation
MAX_NAMED_ITEMS = 3


def summarize(detections: List[DetectionRecord]) -> CategorySummary:
    counts = {category.value: 0 for category in Category}
    for detection in detections:
        counts[detection.category.value] += 1
    return CategorySummary(**counts)


def _item_names(detections: List[DetectionRecord], category: Category) -> List[str]:
    names = []
    for detection in detections:
        name = detection.label.strip()
        if detection.category is category and name and name not in names:
            names.append(name)
    return names


def _join_names(names: List[str]) -> str:
    shown = names[:MAX_NAMED_ITEMS]
    text = ", ".join(shown)
    if len(names) > len(shown):
        text += f" and {len(names) - len(shown)} more"
    return text


def build_recommendations(detections: List[DetectionRecord]) -> List[str]:
    """
    Build human-readable disposal advice, one line per category present.
    """
    if not detections:
        return ["No waste items were detected in this image"]

    templates = [
        (Category.RECYCLABLE, "Separate recyclable items ({items}) for recycling", "Separate recyclable items for recycling"),
        (Category.COMPOSTABLE, "Compost the {items}", "Compost the organic items"),
        (Category.NON_RECYCLABLE, "Dispose of {items} in landfill", "Dispose of non-recyclable items in landfill"),
    ]

    recommendations = []
    for category, named, unnamed in templates:
        if not any(d.category is category for d in detections):
            continue
        names = _item_names(detections, category)
        recommendations.append(named.format(items=_join_names(names)) if names else unnamed)
    return recommendations


def build_analysis_result(detections: List[DetectionRecord]) -> AnalysisResult:
    return AnalysisResult(
        detections=detections,
        summary=summarize(detections),
        recommendations=build_recommendations(detections),
    )
