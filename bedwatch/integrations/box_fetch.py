"""
Scheduled fetch of the housing availability export.
Downloads the shared CSV, then ingests it exactly like a manual upload.

Run from a scheduler (cron, CI workflow): python -m bedwatch.integrations.box_fetch

Setup:
1. Optionally set BEDWATCH_SOURCE_URLS to a comma-separated list of download URLs
2. Optionally set BEDWATCH_DATA_PATH to the history document location
"""

import asyncio
import sys
from typing import List, Optional

import httpx

from ..api.store import SnapshotStore
from ..config import FETCH_TIMEOUT_SECONDS, FETCH_USER_AGENT, SOURCE_URLS
from ..exceptions import FetchError
from ..logger import setup_logger
from ..services.ingestion_service import IngestionService, IngestResult

logger = setup_logger(__name__)


def looks_like_csv(text: str) -> bool:
    """Cheap sanity check that a download is the export and not an HTML page."""
    return ',' in text and len(text.split('\n')) > 2


async def fetch_csv(urls: Optional[List[str]] = None, client: Optional[httpx.AsyncClient] = None) -> str:
    """
    Download the export from the first URL that serves a CSV.

    Shared links redirect to the actual download, so redirects are followed.

    Args:
        urls: Candidate URLs in order (defaults to config.SOURCE_URLS)
        client: Optional client (tests inject a mock transport)

    Returns:
        CSV text

    Raises:
        FetchError: If none of the URLs worked
    """
    urls = urls if urls is not None else SOURCE_URLS
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(
            follow_redirects=True,
            timeout=FETCH_TIMEOUT_SECONDS,
            headers={"User-Agent": FETCH_USER_AGENT},
        )

    try:
        for url in urls:
            try:
                response = await client.get(url)
            except httpx.HTTPError as e:
                logger.warning(f"Failed to fetch from {url}: {e}")
                continue

            if response.status_code != 200:
                logger.warning(f"Fetch from {url} returned HTTP {response.status_code}")
                continue

            text = response.text
            if looks_like_csv(text):
                logger.info(f"Fetched {len(text)} bytes from {url}")
                return text
            logger.warning(f"Response from {url} does not look like CSV")
    finally:
        if owns_client:
            await client.aclose()

    raise FetchError(
        "Could not fetch CSV from any source URL. The file may require "
        "authentication or the link may have changed."
    )


async def fetch_snapshot(
    store: Optional[SnapshotStore] = None,
    urls: Optional[List[str]] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> IngestResult:
    """
    Fetch the export and append it to the history.

    Raises:
        FetchError: If the download failed
    """
    text = await fetch_csv(urls, client)
    result = IngestionService(store).ingest(text)
    logger.info(f"Ingestion finished: {result.status.value} - {result.message}")
    return result


def main() -> int:
    """
    Command-line entry point.

    Returns:
        0 when a snapshot was stored or already present, 1 otherwise
    """
    logger.info("Fetching housing availability CSV...")
    try:
        result = asyncio.run(fetch_snapshot())
    except FetchError as e:
        logger.error(str(e))
        return 1

    if not result.ok:
        logger.error(result.message)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
