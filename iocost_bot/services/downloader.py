"""
Downloader
==========
Fetches accepted result URLs and stores each body under a content-hash name.

Philosophy:
    - Whole body in memory; results are bounded benchmark reports.
    - Hash the bytes as delivered (after transport decoding, before any
      gzip handling of the .json.gz payload itself).
    - Same bytes → same filename, so re-submissions overwrite themselves.
    - No retries: any transport error or non-2xx status aborts the run.
"""
import logging
from pathlib import Path
from typing import Optional

import httpx

from iocost_bot.core.config import DEFAULT_HTTP_TIMEOUT
from iocost_bot.core.errors import FetchError
from iocost_bot.models.downloaded_result import DownloadedResult
from iocost_bot.utils.content_hash import compute_content_hash, result_filename

logger = logging.getLogger(__name__)


class Downloader:
    """
    Downloads result files into download_dir.

    An httpx.Client may be injected (tests use httpx.MockTransport); otherwise
    one is created lazily and closed by close() / the context manager.
    """

    def __init__(
        self,
        download_dir: Path,
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ) -> None:
        self.download_dir = Path(download_dir)
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": "iocost-bot"},
            )
        return self._client

    def fetch(self, url: str) -> DownloadedResult:
        """
        Download url and write it to result-<md5>.json.gz.

        Raises
        ------
        FetchError
            On transport failure or any non-success HTTP status.
        """
        logger.info("Downloading %s", url)
        try:
            response = self.client.get(url, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise FetchError(url, f"{type(e).__name__}: {e}") from e

        content = response.content
        content_hash = compute_content_hash(content)
        path = self.download_dir / result_filename(content_hash)

        try:
            self.download_dir.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            raise FetchError(url, f"could not write {path}: {e}") from e

        result = DownloadedResult(url=url, content_hash=content_hash, path=path, size=len(content))
        logger.info("Saved %d bytes from %s as %s", result.size, url, result.filename)
        return result

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "Downloader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
