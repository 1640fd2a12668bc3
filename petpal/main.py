from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from petpal.api.dependencies import CacheDep
from petpal.api.forum import router as forum_router
from petpal.cache import TTLCache
from petpal.config import settings
from petpal.forum.fetcher import RedditFetcher
from petpal.pipeline import IngestionPipeline
from petpal.utils.logging import SERVICE_NAME, get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    cache = TTLCache()
    client = httpx.AsyncClient(timeout=settings.reddit_timeout_seconds)
    fetcher = RedditFetcher(
        client=client,
        base_url=settings.reddit_base_url,
        user_agent=settings.reddit_user_agent,
        timeout=settings.reddit_timeout_seconds,
    )
    app.state.cache = cache
    app.state.pipeline = IngestionPipeline(
        cache,
        fetcher,
        ttl_seconds=settings.reddit_cache_ttl_seconds,
        dedupe_inflight=settings.reddit_dedupe_inflight,
    )

    # Only start the scheduler in non-test environments
    scheduler = None
    if settings.app_env != "test":
        from petpal.scheduler import create_scheduler

        scheduler = create_scheduler(cache)
        scheduler.start()
        logger.info("scheduler_started", jobs=len(scheduler.get_jobs()))

    yield

    if scheduler is not None:
        scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")
    await client.aclose()
    cache.clear()


app = FastAPI(
    title="PetPal Backend",
    description="Forum feed for the PetPal app: Reddit posts, normalized and cached.",
    version="1.0.0",
    lifespan=lifespan,
)
app.include_router(forum_router)


@app.get("/health", tags=["Health"], openapi_extra={"security": []})
async def health(cache: CacheDep):
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "environment": settings.app_env,
        "cache_entries": len(cache),
    }
