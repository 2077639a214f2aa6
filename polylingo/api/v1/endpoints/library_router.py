from fastapi import APIRouter, Depends, Query, Response, status

from polylingo.core.config import settings
from polylingo.schemas.common_schemas import CountResponse, MessageResponse
from polylingo.schemas.history_schemas import FavoriteCreate, FavoriteResponse, HistoryEntryResponse
from polylingo.services.domain.library_service import LibraryService
from polylingo.services.service_dependencies import get_library_service

router = APIRouter(tags=["library"])


@router.get("/history", response_model=list[HistoryEntryResponse])
async def get_history(
    limit: int = Query(default=settings.max_history_items, ge=1, le=settings.max_history_items),
    offset: int = Query(default=0, ge=0),
    library_service: LibraryService = Depends(get_library_service),
) -> list[HistoryEntryResponse]:
    """
    Get the search history, newest first.
    :param limit: Maximum entries to return
    :param offset: Entries to skip
    :param library_service: Service instance handling history and favorites
    :return: History entries
    """
    return await library_service.get_history(limit=limit, offset=offset)


@router.delete("/history", response_model=CountResponse)
async def clear_history(library_service: LibraryService = Depends(get_library_service)) -> CountResponse:
    """Delete the whole search history."""
    return CountResponse(count=await library_service.clear_history())


@router.get("/favorites", response_model=list[FavoriteResponse])
async def get_favorites(
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    library_service: LibraryService = Depends(get_library_service),
) -> list[FavoriteResponse]:
    """
    Get saved favorites, newest first.
    :param limit: Maximum favorites to return
    :param offset: Favorites to skip
    :param library_service: Service instance handling history and favorites
    :return: Favorites
    """
    return await library_service.get_favorites(limit=limit, offset=offset)


@router.post("/favorites", response_model=FavoriteResponse, status_code=status.HTTP_201_CREATED)
async def add_favorite(
    favorite_data: FavoriteCreate,
    response: Response,
    library_service: LibraryService = Depends(get_library_service),
) -> FavoriteResponse:
    """
    Save a translation as favorite.

    Saving the same text and languages again returns the existing favorite with 200.

    :param favorite_data: Translation to save
    :param response: Response used to downgrade the status for duplicates
    :param library_service: Service instance handling history and favorites
    :return: Saved favorite
    """
    favorite, created = await library_service.add_favorite(favorite_data)
    if not created:
        response.status_code = status.HTTP_200_OK
    return favorite


@router.delete("/favorites/{favorite_id}", response_model=MessageResponse)
async def remove_favorite(
    favorite_id: int,
    library_service: LibraryService = Depends(get_library_service),
) -> MessageResponse:
    """
    Remove a favorite.
    :param favorite_id: Favorite ID
    :param library_service: Service instance handling history and favorites
    :return: Confirmation message
    """
    await library_service.remove_favorite(favorite_id)
    return MessageResponse(message=f"Favorite {favorite_id} removed")
