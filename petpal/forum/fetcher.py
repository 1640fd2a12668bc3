from urllib.parse import quote

import httpx

from petpal.forum.exceptions import MalformedPayloadError, TransportError, UpstreamStatusError
from petpal.forum.models import Post
from petpal.forum.normalizer import normalize_listing
from petpal.utils.logging import get_logger

logger = get_logger(__name__)

_DEFAULT_BASE_URL = "https://www.reddit.com"
_DEFAULT_USER_AGENT = "PetPalBackend/1.0"


class RedditFetcher:
    """Reads a subreddit's public JSON listing (no OAuth) and normalizes it."""

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        base_url: str = _DEFAULT_BASE_URL,
        user_agent: str = _DEFAULT_USER_AGENT,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._headers = {"User-Agent": user_agent, "Accept": "application/json"}
        self._timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    async def aclose(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()

    def listing_url(self, subreddit: str) -> str:
        return f"{self.base_url}/r/{quote(subreddit, safe='')}.json"

    async def fetch(self, subreddit: str) -> list[Post]:
        """
        Issue one GET for the subreddit listing and return its posts in upstream order.

        Raises TransportError, UpstreamStatusError or MalformedPayloadError.
        Nothing is retried.
        """
        url = self.listing_url(subreddit)

        try:
            response = await self._client.get(url, headers=self._headers, timeout=self._timeout)
        except httpx.TimeoutException as exc:
            logger.warning("reddit_fetch_timeout", subreddit=subreddit, error=str(exc))
            raise TransportError(
                f"Reddit request timed out: {exc}", context={"subreddit": subreddit}
            ) from exc
        except httpx.DecodingError as exc:
            logger.warning("reddit_payload_undecodable", subreddit=subreddit, error=str(exc))
            raise MalformedPayloadError(
                f"Reddit response body could not be decoded: {exc}", context={"subreddit": subreddit}
            ) from exc
        except httpx.HTTPError as exc:
            # Connection failures, redirect loops and any other request-level error
            logger.warning("reddit_fetch_transport_error", subreddit=subreddit, error=str(exc))
            raise TransportError(
                f"Reddit request failed: {exc}", context={"subreddit": subreddit}
            ) from exc

        if not response.is_success:
            logger.warning(
                "reddit_api_error",
                subreddit=subreddit,
                status_code=response.status_code,
            )
            raise UpstreamStatusError(
                response.status_code, context={"subreddit": subreddit}
            )

        try:
            data = response.json()
        except ValueError as exc:
            logger.warning("reddit_payload_not_json", subreddit=subreddit, error=str(exc))
            raise MalformedPayloadError(
                f"Reddit response was not valid JSON: {exc}", context={"subreddit": subreddit}
            ) from exc

        posts = normalize_listing(data, subreddit)
        logger.info("reddit_fetched", subreddit=subreddit, count=len(posts))
        return posts
