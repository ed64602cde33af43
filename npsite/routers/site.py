from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse

from npsite.config import settings
from npsite.security import limiter
from npsite.services.content import ContentStore, get_nested_value

logger = logging.getLogger(__name__)

router = APIRouter(tags=["content"])


@lru_cache
def get_content_store() -> ContentStore:
    return ContentStore(settings.content_file)


def _load(store: ContentStore) -> dict:
    try:
        return store.load()
    except FileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Content not found"
        )
    except (OSError, ValueError) as exc:
        logger.error("Failed to load content: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Content unavailable",
        )


@router.get("/content/content.json")
@limiter.limit("120/minute")
def content_document(
    request: Request, store: ContentStore = Depends(get_content_store)
):
    """Full content document consumed by the page templates."""
    return JSONResponse(
        _load(store), headers={"Cache-Control": "public, max-age=300"}
    )


@router.get("/api/content/{path:path}")
@limiter.limit("120/minute")
def content_value(
    path: str, request: Request, store: ContentStore = Depends(get_content_store)
):
    """Single value addressed by dot-path, e.g. ``business.name``."""
    data = _load(store)
    value = get_nested_value(data, path)
    if value is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No content at {path}",
        )
    return JSONResponse({"path": path, "value": value})
