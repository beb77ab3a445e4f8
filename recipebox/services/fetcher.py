from __future__ import annotations

import logging
from typing import Optional

import httpx

from .errors import FetchError
from .types import FetchedImage

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; RecipeImporter/1.0; +http://example.com)"
PAGE_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
IMAGE_ACCEPT = "image/*"
DEFAULT_TIMEOUT_SECONDS = 15.0
MAX_IMAGE_BYTES = 10 * 1024 * 1024
DEFAULT_IMAGE_CONTENT_TYPE = "image/jpeg"


def _create_client(
    timeout: float,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    return httpx.Client(timeout=timeout, follow_redirects=True, transport=transport)


def fetch_page(
    url: str,
    *,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    transport: Optional[httpx.BaseTransport] = None,
) -> str:
    headers = {"User-Agent": user_agent, "Accept": PAGE_ACCEPT}

    try:
        with _create_client(timeout, transport) as client:
            response = client.get(url, headers=headers)
            response.raise_for_status()
            return response.text
    except httpx.HTTPStatusError as error:
        status = error.response.status_code
        phrase = error.response.reason_phrase
        raise FetchError(url, f"Failed to fetch URL: {status} {phrase}".strip()) from error
    except httpx.TimeoutException as error:
        raise FetchError(url, f"Network timeout after {timeout}s") from error
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as error:
        raise FetchError(url, str(error) or error.__class__.__name__) from error


def _read_limited(response: httpx.Response, limit: int) -> Optional[bytes]:
    declared = response.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) >= limit:
        return None

    chunks: list[bytes] = []
    size = 0
    for chunk in response.iter_bytes():
        size += len(chunk)
        if size >= limit:
            return None
        chunks.append(chunk)
    return b"".join(chunks)


def fetch_image(
    url: str,
    *,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    max_bytes: int = MAX_IMAGE_BYTES,
    transport: Optional[httpx.BaseTransport] = None,
) -> Optional[FetchedImage]:
    """Download a candidate image; any problem yields None instead of raising."""
    headers = {"User-Agent": user_agent, "Accept": IMAGE_ACCEPT}

    try:
        with _create_client(timeout, transport) as client:
            with client.stream("GET", url, headers=headers) as response:
                if not response.is_success:
                    logger.warning("Image fetch returned %s: %s", response.status_code, url)
                    return None

                content_type = response.headers.get("content-type") or DEFAULT_IMAGE_CONTENT_TYPE
                content_type = content_type.split(";")[0].strip().lower()
                if not content_type.startswith("image/"):
                    logger.warning("Skipping non-image content type %s: %s", content_type, url)
                    return None

                data = _read_limited(response, max_bytes)
                if data is None:
                    logger.warning("Skipping image larger than %d bytes: %s", max_bytes, url)
                    return None
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as error:
        logger.warning("Image fetch failed for %s: %s", url, error)
        return None

    return FetchedImage(url=url, data=data, content_type=content_type)
