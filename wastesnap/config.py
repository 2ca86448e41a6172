"""
Configuration and initialization for WasteSnap.
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

try:
    from google import genai
    GEMINI_AVAILABLE = True
except ImportError:
    GEMINI_AVAILABLE = False
    logger.warning("google-genai not installed. Install with: pip install google-genai")

# Load environment variables
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

if GEMINI_AVAILABLE and GEMINI_API_KEY:
    try:
        gemini_client = genai.Client(api_key=GEMINI_API_KEY)
    except Exception as e:
        logger.warning(f"Failed to initialize Gemini client: {e}")
        gemini_client = None
else:
    if not GEMINI_AVAILABLE:
        logger.warning("google-genai SDK not available")
    if not GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY not found in environment")
    gemini_client = None

# Serve canned sample detections when no Gemini client is configured
MOCK_DETECTIONS = _env_flag("WASTESNAP_MOCK_DETECTIONS")

# Upload history (LRU result cache)
HISTORY_LIMIT = int(os.getenv("WASTESNAP_HISTORY_LIMIT", "5"))
HISTORY_BACKEND = os.getenv("WASTESNAP_HISTORY_BACKEND", "file").strip().lower()

# Base directories
BASE_DIR = Path(__file__).parent.parent
HISTORY_DIR = Path(os.getenv("WASTESNAP_HISTORY_DIR", str(BASE_DIR / "history")))
