"""Content-addressed local cache for game images."""

import hashlib
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

import httpx
import structlog
from PIL import Image

from .http_client import HttpClientService

log = structlog.stdlib.get_logger()

REMOTE_SCHEMES = ("http://", "https://")
NAMED_EXTENSIONS = {"jpg", "png", "gif"}


def is_remote(reference: str) -> bool:
    return reference.lower().startswith(REMOTE_SCHEMES)


def url_basename(url: str) -> str:
    """Last path segment of a URL, query string included."""
    return url.rstrip().rsplit("/", 1)[-1]


def hash_filename(name: str) -> str:
    """32 hex digit MD5 of name, used as a filesystem-safe cache key."""
    return hashlib.md5(name.encode("utf-8")).hexdigest()


def sniff_image_format(path: Path) -> str | None:
    """Image type read from the file content, as a lowercase extension."""
    try:
        with Image.open(path) as image:
            image_format = image.format
    except (OSError, Image.DecompressionBombError) as e:
        log.warning("Unable to determine image type", path=str(path), error=str(e))
        return None
    if not image_format:
        return None
    return "jpg" if image_format == "JPEG" else image_format.lower()


class ImageCacheService:
    """Resolves image references to local files.

    Remote images are stored under ``<cache>/<md5(basename)>`` with no
    extension. The cache is keyed by name only: once a file exists for a
    name it is never fetched again, even if the remote content changed.
    """

    def __init__(self, cache_directory: Path, http_client: HttpClientService) -> None:
        self.cache_directory = cache_directory
        self.http_client = http_client

    def cache_path(self, url: str) -> Path:
        return self.cache_directory / hash_filename(url_basename(url))

    async def ensure_local(self, reference: str) -> Path | None:
        """Return a local file for a URL or path, fetching it if needed.

        Returns None when the image is unavailable; network and disk
        failures are logged, never raised.
        """
        if not is_remote(reference):
            path = Path(reference)
            return path if path.is_file() else None

        target = self.cache_path(reference)
        if target.exists():
            log.debug("Image already cached", url=reference, path=str(target))
            return target

        try:
            await self.http_client.download_file(reference, target)
        except (httpx.HTTPError, OSError) as e:
            log.warning("Unable to download image", url=reference, error=str(e))
            return None
        return target

    def detect_extension(self, url: str, cached_file: Path) -> str | None:
        """Extension for a fetched image: from the URL name, else from the content."""
        suffix = PurePosixPath(urlparse(url).path).suffix.lstrip(".").lower()
        if suffix in NAMED_EXTENSIONS:
            return suffix
        return sniff_image_format(cached_file)

    def bundle_filename(self, url: str, cached_file: Path) -> str:
        """Final filename of an image inside a game bundle: hash plus extension if known."""
        name = hash_filename(url_basename(url))
        extension = self.detect_extension(url, cached_file)
        return f"{name}.{extension}" if extension else name
