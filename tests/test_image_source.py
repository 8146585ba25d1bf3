"""Tests for upload validation and image download."""

import base64

import httpx
import pytest

from calorie_tracker_api.core.exceptions import ImageSourceError
from calorie_tracker_api.services.image_source import (
    check_image_url,
    download_image,
    encode_image,
    format_file_size,
    validate_image,
)

# Sample test image (1x1 red pixel PNG)
TINY_PNG_BASE64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8DwHwAFBQIAX8jx0gAAAABJRU5ErkJggg=="
)
TINY_PNG_BYTES = base64.b64decode(TINY_PNG_BASE64)

ALLOWED_HOSTS = {"storage.test"}


class TestValidateImage:
    """Tests for upload validation."""

    def test_accepts_supported_image(self):
        """Test a small PNG passes validation."""
        validate_image(TINY_PNG_BYTES, "image/png", max_size=1024)

    def test_rejects_unsupported_type(self):
        """Test non-image content types are rejected with 400."""
        with pytest.raises(ImageSourceError, match="Invalid file type") as exc:
            validate_image(TINY_PNG_BYTES, "application/pdf", max_size=1024)

        assert exc.value.status_code == 400

    def test_rejects_oversized_image(self):
        """Test files over max_size are rejected."""
        with pytest.raises(ImageSourceError, match="Maximum size is 10 Bytes"):
            validate_image(TINY_PNG_BYTES, "image/png", max_size=10)

    def test_rejects_empty_file(self):
        """Test empty uploads are rejected."""
        with pytest.raises(ImageSourceError, match="No image"):
            validate_image(b"", "image/jpeg", max_size=1024)

    def test_format_file_size(self):
        """Test human-readable size formatting."""
        assert format_file_size(0) == "0 Bytes"
        assert format_file_size(1536) == "1.5 KB"
        assert format_file_size(10 * 1024 * 1024) == "10 MB"


class TestCheckImageUrl:
    """Tests for image URL parsing and host allow-listing."""

    def test_accepts_allowed_host(self):
        """Test an https URL on an allowed host is accepted."""
        parsed = check_image_url("https://storage.test/meal.png", ALLOWED_HOSTS)

        assert parsed.host == "storage.test"

    def test_malformed_url_raises(self):
        """Test an unparseable URL raises ImageSourceError, not InvalidURL."""
        with pytest.raises(ImageSourceError, match="Invalid image URL") as exc:
            check_image_url("http://[::1", ALLOWED_HOSTS)

        assert exc.value.status_code == 400

    def test_disallowed_host_raises(self):
        """Test hosts outside the allow-list are rejected."""
        with pytest.raises(ImageSourceError, match="not allowed") as exc:
            check_image_url("http://169.254.169.254/latest/meta-data", ALLOWED_HOSTS)

        assert exc.value.details == {"host": "169.254.169.254"}

    def test_non_http_scheme_raises(self):
        """Test non-http(s) schemes are rejected."""
        with pytest.raises(ImageSourceError, match="Invalid image URL"):
            check_image_url("file:///etc/passwd", ALLOWED_HOSTS)

    def test_empty_allow_list_rejects_everything(self):
        """Test URL images are disabled when no hosts are configured."""
        with pytest.raises(ImageSourceError, match="not allowed"):
            check_image_url("https://storage.test/meal.png", [])


class TestDownloadImage:
    """Tests for download_image."""

    @pytest.mark.asyncio
    async def test_returns_base64_content(self):
        """Test a successful download returns base64 data."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=TINY_PNG_BYTES)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            result = await download_image(
                "https://storage.test/meal.png",
                allowed_hosts=ALLOWED_HOSTS,
                client=client,
            )

        assert result == encode_image(TINY_PNG_BYTES) == TINY_PNG_BASE64

    @pytest.mark.asyncio
    async def test_non_200_raises(self):
        """Test a 404 response raises with the status code."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ImageSourceError, match="Failed to download image") as exc:
                await download_image(
                    "https://storage.test/missing.png",
                    allowed_hosts=ALLOWED_HOSTS,
                    client=client,
                )

        assert exc.value.details == {"status_code": 404}

    @pytest.mark.asyncio
    async def test_redirect_is_not_followed(self):
        """Test a redirect to another host is refused rather than followed."""
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(request.url.host)
            return httpx.Response(
                302, headers={"location": "http://169.254.169.254/latest/meta-data"}
            )

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ImageSourceError) as exc:
                await download_image(
                    "https://storage.test/meal.png",
                    allowed_hosts=ALLOWED_HOSTS,
                    client=client,
                )

        assert exc.value.details == {"status_code": 302}
        assert requested == ["storage.test"]

    @pytest.mark.asyncio
    async def test_connection_error_raises(self):
        """Test transport errors become ImageSourceError."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ImageSourceError):
                await download_image(
                    "https://storage.test/slow.png",
                    allowed_hosts=ALLOWED_HOSTS,
                    client=client,
                )

    @pytest.mark.asyncio
    async def test_malformed_url_raises_before_request(self):
        """Test an unparseable URL never reaches the transport."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ImageSourceError, match="Invalid image URL"):
                await download_image(
                    "http://[::1", allowed_hosts=ALLOWED_HOSTS, client=client
                )

    @pytest.mark.asyncio
    async def test_oversized_download_raises(self):
        """Test a body larger than max_size is rejected."""
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"x" * 100)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ImageSourceError, match="too large"):
                await download_image(
                    "https://storage.test/huge.png",
                    allowed_hosts=ALLOWED_HOSTS,
                    client=client,
                    max_size=50,
                )

    @pytest.mark.asyncio
    async def test_declared_content_length_rejected_before_reading(self):
        """Test a large Content-Length is rejected without reading the body."""
        chunks_sent = 0

        async def body():
            nonlocal chunks_sent
            for _ in range(10):
                chunks_sent += 1
                yield b"x" * 10

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"content-length": "100"}, content=body())

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ImageSourceError, match="too large"):
                await download_image(
                    "https://storage.test/huge.png",
                    allowed_hosts=ALLOWED_HOSTS,
                    client=client,
                    max_size=50,
                )

        assert chunks_sent == 0

    @pytest.mark.asyncio
    async def test_streamed_body_stops_once_over_limit(self):
        """Test a chunked body without Content-Length is cut off at max_size."""
        chunks_sent = 0

        async def body():
            nonlocal chunks_sent
            for _ in range(1000):
                chunks_sent += 1
                yield b"x" * 10

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=body())

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ImageSourceError, match="too large"):
                await download_image(
                    "https://storage.test/endless.png",
                    allowed_hosts=ALLOWED_HOSTS,
                    client=client,
                    max_size=50,
                )

        assert chunks_sent < 10
