"""
API routes for WasteSnap.
"""

import logging
from typing import Optional

from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response

from wastesnap import config
from wastesnap.errors import MalformedResponse, MissingInput, UpstreamFailure
from wastesnap.gemini.detection import detect_objects
from wastesnap.history.cache import ResultCache
from wastesnap.history.stores import JsonFileStore, MemoryStore
from wastesnap.image_processing.rendering import render_detections_png
from wastesnap.service import analyze_upload
from wastesnap.utils.hashing import from_data_url

logger = logging.getLogger(__name__)

router = APIRouter()


def create_history_cache() -> ResultCache:
    if config.HISTORY_BACKEND == "memory":
        store = MemoryStore()
    else:
        store = JsonFileStore(config.HISTORY_DIR)
    return ResultCache(store, capacity=config.HISTORY_LIMIT)


history_cache = create_history_cache()


@router.get("/health")
async def health():
    return {"status": "ok", "gemini": config.gemini_client is not None}


@router.post("/api/gemini")
async def analyze_image(image: Optional[UploadFile] = File(None)):
    """
    Detect and categorize waste objects in an uploaded image.

    Returns JSON with detections, per-category summary and recommendations.
    """
    if image is None:
        return JSONResponse({"error": "No image provided"}, status_code=400)

    content_type = image.content_type or ""
    if not content_type.startswith("image/"):
        return JSONResponse({"error": "File must be an image"}, status_code=400)

    image_bytes = await image.read()
    try:
        result = await run_in_threadpool(
            analyze_upload, image_bytes, content_type, history_cache, detect_objects
        )
        return JSONResponse(result)

    except MissingInput as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    except MalformedResponse as e:
        logger.warning(f"Malformed Gemini response: {e}")
        return JSONResponse(
            {"error": "Failed to process image", "details": str(e), "raw": e.raw_text},
            status_code=502,
        )
    except UpstreamFailure as e:
        return JSONResponse(
            {"error": "Failed to process image", "details": str(e)},
            status_code=502,
        )


@router.get("/api/history")
async def list_history():
    """List cached analyses, most recently used first"""
    entries = history_cache.list_all()
    return {"entries": [e.model_dump(mode="json", by_alias=True) for e in entries]}


@router.delete("/api/history")
async def clear_history():
    history_cache.clear()
    return {"success": True}


@router.get("/api/history/{image_hash}")
async def get_history_entry(image_hash: str):
    """Fetch a cached analysis (counts as a use for LRU ordering)"""
    entry = history_cache.get(image_hash)
    if entry is None:
        raise HTTPException(status_code=404, detail="Entry not found")
    return entry.model_dump(mode="json", by_alias=True)


@router.get("/api/history/{image_hash}/render")
async def render_history_entry(image_hash: str):
    """Serve the cached image with its detection boxes drawn on top"""
    entry = history_cache.get(image_hash)
    if entry is None:
        raise HTTPException(status_code=404, detail="Entry not found")

    try:
        image_bytes = from_data_url(entry.image_data_url)
        png = await run_in_threadpool(render_detections_png, image_bytes, entry.result.detections)
    except Exception as e:
        logger.error(f"Rendering error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Rendering error: {str(e)}")

    return Response(content=png, media_type="image/png")
