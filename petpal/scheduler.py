"""
APScheduler wiring.

The forum cache is swept on a fixed interval so expired subreddit entries
do not pile up between reads. The scheduler is started/stopped as part of
the FastAPI lifespan.

CLI usage (fetch subreddits once through a fresh pipeline, log counts, exit):
    python -m petpal.scheduler --run-now [subreddit ...]
"""

import asyncio
import sys

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from petpal.cache import TTLCache
from petpal.config import settings
from petpal.forum.exceptions import IngestionError
from petpal.forum.fetcher import RedditFetcher
from petpal.forum.normalizer import normalize_subreddit
from petpal.pipeline import IngestionPipeline
from petpal.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def sweep_cache(cache: TTLCache) -> int:
    removed = cache.sweep()
    logger.info("cache_sweep_complete", removed=removed, remaining=len(cache))
    return removed


def create_scheduler(cache: TTLCache) -> AsyncIOScheduler:
    """Create and configure the APScheduler instance (not yet started)."""
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        sweep_cache,
        "interval",
        seconds=settings.cache_sweep_interval_seconds,
        args=[cache],
        id="cache_sweep",
        max_instances=1,
        coalesce=True,
    )
    return scheduler


def build_fetcher() -> RedditFetcher:
    return RedditFetcher(
        base_url=settings.reddit_base_url,
        user_agent=settings.reddit_user_agent,
        timeout=settings.reddit_timeout_seconds,
    )


# --------------------------------------------------------------------------- #
# CLI entry point: python -m petpal.scheduler --run-now
# --------------------------------------------------------------------------- #

async def _run_now(subreddits: list[str]) -> int:
    setup_logging()
    fetcher = build_fetcher()
    pipeline = IngestionPipeline(
        TTLCache(),
        fetcher,
        ttl_seconds=settings.reddit_cache_ttl_seconds,
    )
    failures = 0
    try:
        for name in subreddits:
            try:
                posts = await pipeline.get_posts(normalize_subreddit(name))
            except (IngestionError, ValueError) as exc:
                failures += 1
                logger.error("run_now_failed", subreddit=name, error=str(exc))
                continue
            logger.info("run_now_result", subreddit=name, count=len(posts))
    finally:
        await fetcher.aclose()
    return failures


if __name__ == "__main__":
    if "--run-now" in sys.argv:
        names = [arg for arg in sys.argv[1:] if arg != "--run-now"] or [settings.default_subreddit]
        sys.exit(1 if asyncio.run(_run_now(names)) else 0)
    else:
        print("Usage: python -m petpal.scheduler --run-now [subreddit ...]")
        sys.exit(1)
