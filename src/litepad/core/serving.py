# src/litepad/core/serving.py
"""Serving of stored images for litepad://images/{digest}{ext} URLs.

resolve_image_request maps a request path onto the images root and is
independent of any web framework; create_app wraps it in a Starlette ASGI
application for hosts that load the URLs over HTTP.

Responses:
    200  file content, Content-Type from the extension, immutable caching
    404  empty body, for unknown paths and missing images
    500  empty body, when the image exists but cannot be read

Content addressing makes the cache headers safe: a name changes if and
only if its content changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import unquote

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from litepad.contracts.blob_store import IMAGE_URL_PREFIX
from litepad.core.blob_store import validate_digest, validate_extension
from litepad.core.context import StoreContext
from litepad.core.files import is_partial
from litepad.core.logging import get_logger

logger = get_logger(__name__)

IMAGES_ROUTE_PREFIX = "/images/"
IMMUTABLE_CACHE_CONTROL = "max-age=31536000, immutable"
DEFAULT_MEDIA_TYPE = "application/octet-stream"

_MEDIA_TYPES: dict[str, str] = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "bmp": "image/bmp",
}


def media_type_for(extension: str) -> str:
    """Content type for an extension such as '.png' or 'PNG'."""
    return _MEDIA_TYPES.get(extension.lstrip(".").lower(), DEFAULT_MEDIA_TYPE)


def parse_image_url(url: str) -> tuple[str, str]:
    """Split a litepad://images/ URL into (digest, extension).

    Raises:
        ValueError: If url is not a well-formed image reference
    """
    if not url.startswith(IMAGE_URL_PREFIX):
        raise ValueError(f"Not an image URL: {url!r}")
    filename = url[len(IMAGE_URL_PREFIX) :]
    digest, extension = filename[:64], filename[64:]
    validate_digest(digest)
    validate_extension(extension)
    return digest, extension


@dataclass(frozen=True, slots=True)
class ImageResponse:
    """Framework-neutral HTTP-style response."""

    status: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)


_NOT_FOUND = ImageResponse(status=404)


def _is_plain_filename(filename: str) -> bool:
    return (
        bool(filename)
        and "/" not in filename
        and "\\" not in filename
        and filename not in (".", "..")
        and not is_partial(Path(filename))
    )


def resolve_image_request(images_root: Path, request_path: str) -> ImageResponse:
    """Answer a request for /images/{filename} from images_root."""
    if not request_path.startswith(IMAGES_ROUTE_PREFIX):
        return _NOT_FOUND

    filename = unquote(request_path[len(IMAGES_ROUTE_PREFIX) :])
    if not _is_plain_filename(filename):
        return _NOT_FOUND

    path = images_root / filename
    if not path.is_file():
        return _NOT_FOUND

    try:
        content = path.read_bytes()
    except OSError as e:
        logger.error("image_read_failed", filename=filename, error=str(e))
        return ImageResponse(status=500)

    return ImageResponse(
        status=200,
        body=content,
        headers={
            "Content-Type": media_type_for(Path(filename).suffix or ".png"),
            "Cache-Control": IMMUTABLE_CACHE_CONTROL,
        },
    )


def create_app(context: StoreContext) -> Starlette:
    """Build the ASGI application serving context's images root."""

    async def image_endpoint(request: Request) -> Response:
        result = await run_in_threadpool(resolve_image_request, context.images_root, request.url.path)
        return Response(content=result.body, status_code=result.status, headers=result.headers)

    async def not_found_endpoint(request: Request) -> Response:
        return Response(content=b"", status_code=404)

    return Starlette(
        routes=[
            Route("/images/{filename}", image_endpoint, methods=["GET"]),
            Route("/{path:path}", not_found_endpoint, methods=["GET"]),
        ],
    )
