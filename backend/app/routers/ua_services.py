from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.exceptions import handle_exception
from app.schemas.streaming import StreamingSearchResponse
from app.services.streaming_search_service import StreamingSearchService, get_streaming_search_service

router = APIRouter(prefix="/api/ua-services", tags=["streaming"])


@router.get("/search", response_model=StreamingSearchResponse, response_model_exclude_none=True)
async def search_ua_services(
    title: Optional[str] = Query(None, description="Movie title"),
    year: Optional[str] = Query(None, description="Release year"),
    service: Optional[str] = Query(None, description="Search only this site"),
    search_service: StreamingSearchService = Depends(get_streaming_search_service),
):
    """Find the movie on Ukrainian streaming sites"""
    try:
        return await search_service.search(title, year, service)
    except Exception as e:
        raise handle_exception(e, "Помилка при пошуку фільму на українських сервісах")
