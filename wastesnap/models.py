"""
Data models shared by the normalizer, the result cache and the API.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    RECYCLABLE = "recyclable"
    COMPOSTABLE = "compostable"
    NON_RECYCLABLE = "non_recyclable"


class DetectionRecord(BaseModel):
    """One detected object with normalized geometry (origin top-left, 0-1)."""

    model_config = ConfigDict(frozen=True)

    label: str = ""
    confidence: float = 0.5
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    category: Category = Category.RECYCLABLE
    description: str = ""
    is_trash: bool = False


class CategorySummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    recyclable: int = 0
    compostable: int = 0
    non_recyclable: int = 0


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    detections: List[DetectionRecord] = []
    summary: CategorySummary = CategorySummary()
    recommendations: List[str] = []


class HistoryEntry(BaseModel):
    """A cached analysis, keyed by the SHA-256 of the image bytes."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    hash: str
    image_data_url: str = Field("", alias="imageDataUrl")
    result: AnalysisResult
    timestamp: int
