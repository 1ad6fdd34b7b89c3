"""Place search endpoint - GET /places/search."""

import logging
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, status

from backend.app.adapters.places import PlaceSearch
from backend.app.api.deps import get_place_search
from backend.app.models.places import Place

router = APIRouter(prefix="/places", tags=["places"])
logger = logging.getLogger(__name__)


@router.get(
    "/search",
    response_model=Place,
    responses={
        status.HTTP_404_NOT_FOUND: {"description": "No matching place"},
        status.HTTP_502_BAD_GATEWAY: {"description": "Place search provider failed"},
    },
)
async def search_place(
    search: Annotated[PlaceSearch, Depends(get_place_search)],
    q: Annotated[str, Query(min_length=1)],
    region: str | None = None,
) -> Place:
    """Return the best match for a free-text query.

    Raises:
        HTTPException: 404 when nothing matched, 502 when the provider is unreachable
    """
    try:
        place = await search.search(q, region)
    except httpx.HTTPError as e:
        logger.warning("Place search for %r failed: %s", q, type(e).__name__)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Place search unavailable"
        ) from e
    if place is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No matching place")
    return place
