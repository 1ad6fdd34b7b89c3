"""Favorites endpoint - GET /favorites (read-only candidates for a trip)."""

from typing import Annotated

from fastapi import APIRouter, Depends

from backend.app.api.auth import get_current_context
from backend.app.api.deps import get_favorites_store
from backend.app.db.context import RequestContext
from backend.app.db.repositories import FavoritesStore
from backend.app.models.places import Place

router = APIRouter(tags=["favorites"])


@router.get("/favorites", response_model=list[Place])
async def list_favorites(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    store: Annotated[FavoritesStore, Depends(get_favorites_store)],
) -> list[Place]:
    """List the signed-in user's saved places."""
    return store.list_favorites(ctx)
