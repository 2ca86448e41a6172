"""
Error types raised by the WasteSnap pipeline.
"""

from typing import Optional


class WasteSnapError(Exception):
    """Base class for all WasteSnap errors."""


class MissingInput(WasteSnapError):
    """No image was provided with the request."""


class UpstreamFailure(WasteSnapError):
    """The vision model call failed (network, quota, auth, ...)."""


class MalformedResponse(WasteSnapError):
    """The vision model returned text that is not a JSON array."""

    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message)
        self.raw_text = raw_text


class CacheUnavailable(WasteSnapError):
    """The key-value store backing the result cache cannot be used."""
