"""
Content hashing and data URL helpers for uploaded images.
"""

import base64
import hashlib


def hash_image_bytes(image_bytes: bytes) -> str:
    """Hex-encoded SHA-256 digest of the raw image bytes."""
    return hashlib.sha256(image_bytes).hexdigest()


def to_data_url(image_bytes: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def from_data_url(data_url: str) -> bytes:
    """
    Decode the payload of a base64 data URL.

    Raises:
        ValueError: If the string is not a base64 data URL
    """
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("Not a base64 data URL")
    return base64.b64decode(payload)
