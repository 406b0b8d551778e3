"""HTTP client service for fetching remote game images."""

import asyncio
from pathlib import Path
from typing import Any

import httpx
import structlog

log = structlog.stdlib.get_logger()


class HttpClientService:
    """Downloads files with connect/read timeouts and optional retries."""

    def __init__(
        self,
        connect_timeout: float = 2.0,
        read_timeout: float = 10.0,
        max_retries: int = 0,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client service.

        Args:
            connect_timeout: Connection timeout in seconds
            read_timeout: Read timeout in seconds
            max_retries: Retry attempts for server errors and transport failures
            base_delay: Base delay for exponential backoff in seconds
            max_delay: Maximum delay between retries in seconds
            transport: Optional custom transport (e.g. httpx.MockTransport)
        """
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay

        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(read_timeout, connect=connect_timeout),
            headers={"User-Agent": "jjtrivia/0.1"},
            follow_redirects=True,
            transport=transport,
        )

        log.info(
            "HTTP client service initialized",
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
            max_retries=max_retries,
        )

    async def download_file(self, url: str, path: Path, chunk_size: int = 8192) -> None:
        """Download url into path, removing any partial file on failure.

        Raises:
            httpx.HTTPError: If the request fails after all attempts
            OSError: If the file cannot be written
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        for attempt in range(self.max_retries + 1):
            try:
                log.debug("Starting file download", url=url, path=str(path), attempt=attempt + 1)

                async with self._client.stream("GET", url) as response:
                    response.raise_for_status()

                    downloaded = 0
                    with open(path, "wb") as f:
                        async for chunk in response.aiter_bytes(chunk_size):
                            f.write(chunk)
                            downloaded += len(chunk)

                log.info("File download completed", url=url, path=str(path), size=downloaded)
                return

            except (httpx.HTTPError, OSError) as e:
                log.warning(
                    "File download failed",
                    url=url,
                    path=str(path),
                    attempt=attempt + 1,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                self._remove_partial(path)

                if isinstance(e, OSError):
                    raise
                if isinstance(e, httpx.HTTPStatusError) and e.response.status_code < 500:
                    raise
                if attempt == self.max_retries:
                    raise

                delay = min(self.base_delay * (2 ** attempt), self.max_delay)
                log.info("Retrying download after delay", delay=delay)
                await asyncio.sleep(delay)

        raise RuntimeError("Unexpected end of retry loop")

    @staticmethod
    def _remove_partial(path: Path) -> None:
        if path.exists():
            try:
                path.unlink()
                log.debug("Cleaned up partial download", path=str(path))
            except OSError:
                log.warning("Failed to clean up partial download", path=str(path))

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self._client.aclose()
        log.info("HTTP client closed")

    async def __aenter__(self) -> "HttpClientService":
        return self

    async def __aexit__(self, exc_type: type[Exception] | None, exc_val: Exception | None, exc_tb: Any) -> None:
        await self.close()
