"""
Cache lookup → fetch on miss → cache write → respond.

Failures from the fetcher propagate unchanged and leave the cache untouched,
so the next call for the same subreddit simply tries upstream again.
"""

import asyncio
from typing import Protocol

from petpal.cache import TTLCache
from petpal.forum.models import Post
from petpal.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 300


class PostFetcher(Protocol):
    async def fetch(self, subreddit: str) -> list[Post]: ...


def cache_key(subreddit: str) -> str:
    return f"reddit:{subreddit}"


class IngestionPipeline:
    """
    Single entry point for Reddit posts: ``await pipeline.get_posts("pets")``.

    With ``dedupe_inflight`` enabled, concurrent misses on the same key share
    one upstream fetch and one cache write. Without it, racing misses each
    fetch and the last write wins.
    """

    def __init__(
        self,
        cache: TTLCache,
        fetcher: PostFetcher,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        dedupe_inflight: bool = True,
    ) -> None:
        self.cache = cache
        self.fetcher = fetcher
        self.ttl_seconds = ttl_seconds
        self.dedupe_inflight = dedupe_inflight
        self._inflight: dict[str, asyncio.Task] = {}

    async def get_posts(self, subreddit: str) -> tuple[Post, ...]:
        key = cache_key(subreddit)

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("reddit_cache_hit", key=key, count=len(cached))
            return cached

        logger.debug("reddit_cache_miss", key=key)
        if not self.dedupe_inflight:
            return await self._fetch_and_store(subreddit, key)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._fetch_and_store(subreddit, key))
            self._inflight[key] = task
            task.add_done_callback(lambda done, key=key: self._forget(key, done))
        else:
            logger.debug("reddit_fetch_joined", key=key)

        # A cancelled caller must not cancel the fetch other callers are awaiting
        return await asyncio.shield(task)

    def invalidate(self, subreddit: str) -> None:
        self.cache.delete(cache_key(subreddit))

    async def _fetch_and_store(self, subreddit: str, key: str) -> tuple[Post, ...]:
        try:
            posts = tuple(await self.fetcher.fetch(subreddit))
        except Exception as exc:
            logger.warning(
                "reddit_ingest_failed",
                subreddit=subreddit,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise

        self.cache.set(key, posts, self.ttl_seconds)
        logger.info("reddit_cache_populated", key=key, count=len(posts), ttl=self.ttl_seconds)
        return posts

    def _forget(self, key: str, done: asyncio.Task) -> None:
        if self._inflight.get(key) is done:
            del self._inflight[key]
        # Mark the exception retrieved even if every waiter went away
        if not done.cancelled():
            done.exception()
