from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from petpal.api.dependencies import PipelineDep
from petpal.config import settings
from petpal.forum.exceptions import IngestionError
from petpal.forum.normalizer import normalize_subreddit
from petpal.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/forum", tags=["Forum"])

_FETCH_FAILED = "Failed to fetch Reddit posts"
_INVALID_SUBREDDIT = "Invalid subreddit name"


@router.get("/reddit/posts")
async def get_reddit_posts(
    pipeline: PipelineDep,
    subreddit: str | None = Query(default=None),
):
    """Recent posts for a subreddit, served from cache for up to the configured TTL."""
    requested = subreddit or settings.default_subreddit
    try:
        name = normalize_subreddit(requested)
    except ValueError:
        return JSONResponse(status_code=400, content={"error": _INVALID_SUBREDDIT})

    try:
        posts = await pipeline.get_posts(name)
    except IngestionError as exc:
        # Upstream detail stays in the logs, never in the response body
        logger.error(
            "forum_reddit_posts_failed",
            subreddit=name,
            error_type=type(exc).__name__,
            error=str(exc),
            status_code=getattr(exc, "status_code", None),
        )
        return JSONResponse(status_code=502, content={"error": _FETCH_FAILED})

    return [post.to_api_dict() for post in posts]
