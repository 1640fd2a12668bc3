"""
FastAPI dependency providers.

The cache and pipeline are built once in the app lifespan and parked on
``app.state``; routes reach them through these functions so tests can swap
them via ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends, Request

from petpal.cache import TTLCache
from petpal.pipeline import IngestionPipeline


def get_pipeline(request: Request) -> IngestionPipeline:
    return request.app.state.pipeline


def get_cache(request: Request) -> TTLCache:
    return request.app.state.cache


PipelineDep = Annotated[IngestionPipeline, Depends(get_pipeline)]
CacheDep = Annotated[TTLCache, Depends(get_cache)]
