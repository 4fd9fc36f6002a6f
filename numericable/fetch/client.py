"""HTTP client construction and page retrieval."""
import logging
from typing import Optional
import httpx

from numericable.config import config
from numericable.errors import UnknownError
from numericable.fetch.endpoints import bills_page_url

logger = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "fr-FR,fr;q=0.9,en-US;q=0.8,en;q=0.7",
}


def build_client(
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Build the HTTP client of a single run.

    Redirects are followed and every request of the run shares the client's
    cookie jar. The client is never reused across runs.
    """
    kwargs = {}
    if transport is not None:
        kwargs["transport"] = transport
    else:
        kwargs["http2"] = True

    return httpx.AsyncClient(
        headers=HEADERS,
        cookies=httpx.Cookies(),
        follow_redirects=True,
        timeout=timeout if timeout is not None else config.TIMEOUT,
        **kwargs,
    )


async def fetch_bills_page(client: httpx.AsyncClient) -> httpx.Response:
    """Fetch the billing-history page with an authenticated client."""
    logger.info("Fetching bills page")
    url = bills_page_url()
    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"An error occured while fetching bills page: {e}")
        raise UnknownError(f"Could not fetch {url}") from e
    logger.debug(f"Bills page {url} -> {response.status_code} ({len(response.content)} bytes)")
    return response
