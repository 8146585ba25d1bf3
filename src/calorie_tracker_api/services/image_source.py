"""Obtain base64 image data from uploads or remote URLs."""

import base64
import logging
from collections.abc import Collection

import httpx

from calorie_tracker_api.core.exceptions import ImageSourceError

logger = logging.getLogger(__name__)


ALLOWED_CONTENT_TYPES = frozenset(
    {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/webp",
        "image/heic",
        "image/heif",
    }
)


def format_file_size(size: int) -> str:
    """Human-readable size, e.g. ``10 MB``."""
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size)
    for unit in units:
        if value < 1024 or unit == units[-1]:
            return f"{round(value, 2):g} {unit}"
        value /= 1024
    return f"{size} Bytes"


def validate_image(content: bytes, content_type: str | None, max_size: int) -> None:
    """
    Validate an uploaded image's type and size.

    Raises:
        ImageSourceError: If the type is unsupported, or the file is empty or too large
    """
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise ImageSourceError(
            "Invalid file type. Please upload a JPEG, PNG, WebP, HEIC, or HEIF image.",
            details={"content_type": content_type},
        )
    if not content:
        raise ImageSourceError("No image provided")
    if len(content) > max_size:
        raise ImageSourceError(
            f"File size too large. Maximum size is {format_file_size(max_size)}.",
            details={"size": len(content), "max_size": max_size},
        )


def encode_image(content: bytes) -> str:
    """Base64-encode raw image bytes."""
    return base64.b64encode(content).decode("utf-8")


def check_image_url(url: str, allowed_hosts: Collection[str]) -> httpx.URL:
    """
    Parse an image URL and check it points at an allowed host.

    Only http(s) URLs whose host is listed in ``allowed_hosts`` are
    accepted. An empty collection rejects every URL.

    Raises:
        ImageSourceError: If the URL is malformed or its host is not allowed
    """
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise ImageSourceError(f"Invalid image URL: {e}") from e

    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ImageSourceError("Invalid image URL", details={"url": url})
    if parsed.host not in allowed_hosts:
        raise ImageSourceError(
            "Image URL host is not allowed",
            details={"host": parsed.host},
        )
    return parsed


async def _read_limited(response: httpx.Response, max_size: int) -> bytes:
    """Read a streamed body, stopping once it exceeds max_size."""
    too_large = ImageSourceError(
        f"Image too large. Maximum size is {format_file_size(max_size)}.",
        details={"max_size": max_size},
    )

    declared = response.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_size:
        raise too_large

    content = bytearray()
    async for chunk in response.aiter_bytes():
        content.extend(chunk)
        if len(content) > max_size:
            raise too_large
    return bytes(content)


async def download_image(
    url: str,
    *,
    allowed_hosts: Collection[str],
    timeout: float = 30.0,
    max_size: int = 10 * 1024 * 1024,
    client: httpx.AsyncClient | None = None,
) -> str:
    """
    Download an image and return it base64-encoded.

    Redirects are not followed, so the image must be served directly by
    an allowed host.

    Args:
        url: Image URL (e.g. a signed storage URL)
        allowed_hosts: Hosts images may be fetched from
        timeout: Request timeout in seconds
        max_size: Maximum accepted body size in bytes
        client: Optional HTTP client to reuse

    Returns:
        Base64-encoded image bytes

    Raises:
        ImageSourceError: If the URL is rejected, the download fails or the
            image is too large
    """
    parsed = check_image_url(url, allowed_hosts)

    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
    try:
        async with http.stream("GET", parsed, follow_redirects=False) as response:
            if response.status_code != 200:
                raise ImageSourceError(
                    f"Failed to download image: {response.reason_phrase}",
                    details={"status_code": response.status_code},
                )
            content = await _read_limited(response, max_size)
    except (httpx.RequestError, httpx.InvalidURL) as e:
        logger.warning(f"Image download failed: {e}")
        raise ImageSourceError(f"Failed to download image: {e}") from e
    finally:
        if owns_client:
            await http.aclose()

    if not content:
        raise ImageSourceError("Downloaded image is empty")

    logger.debug(f"Downloaded image ({len(content)} bytes)")
    return encode_image(content)
