"""Preset style reference gallery and fetching of reference images."""
import mimetypes
from typing import List, Optional

import httpx

from config import Config
from common.models import EncodedImage
from utils.logger import get_logger

logger = get_logger("image.references")

REFERENCE_IMAGES: List[str] = list(Config.REFERENCE_IMAGES)
REFERENCE_ALT = "Reference Style"


def is_reference_image(url: str) -> bool:
    return url in REFERENCE_IMAGES


def _media_type_for(url: str, content_type: Optional[str]) -> str:
    # Drop parameters such as "; charset=binary"
    if content_type:
        media_type = content_type.split(";", 1)[0].strip().lower()
        if media_type:
            return media_type
    guessed, _ = mimetypes.guess_type(url)
    return guessed or "image/png"


def fetch_reference_image(url: str, client: Optional[httpx.Client] = None) -> EncodedImage:
    """
    Download a reference image and encode it for a generation request.

    Args:
        url: Image URL (normally one of REFERENCE_IMAGES)
        client: Optional httpx client; a short-lived one is created otherwise

    Returns:
        EncodedImage with the body as base64 and the served media type

    Raises:
        RuntimeError: on transport failure or a non-success status
    """
    logger.info(f"Fetching reference image: {url}")
    try:
        if client is None:
            with httpx.Client(timeout=Config.REFERENCE_FETCH_TIMEOUT, follow_redirects=True) as http_client:
                response = http_client.get(url)
                response.raise_for_status()
        else:
            response = client.get(url)
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error(f"Reference image server returned {e.response.status_code} for {url}")
        raise RuntimeError(f"Reference image request failed with status {e.response.status_code}")
    except httpx.RequestError as e:
        logger.error(f"Failed to fetch reference image {url}: {e}")
        raise RuntimeError(f"Failed to fetch reference image: {e}")

    body = response.content
    if not body:
        raise RuntimeError("Reference image response was empty")

    mime_type = _media_type_for(url, response.headers.get("content-type"))
    logger.info(f"Fetched reference image: {len(body)} bytes ({mime_type})")
    return EncodedImage.from_bytes(body, mime_type)
