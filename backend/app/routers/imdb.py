from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.exceptions import handle_exception
from app.schemas.streaming import ImdbRatingResponse
from app.services.imdb_service import ImdbRatingService, get_imdb_rating_service

router = APIRouter(prefix="/api/imdb", tags=["imdb"])


@router.get("/rating", response_model=ImdbRatingResponse)
def get_imdb_rating(
    title: Optional[str] = Query(None, description="Movie title"),
    year: Optional[str] = Query(None, description="Release year"),
    imdb_service: ImdbRatingService = Depends(get_imdb_rating_service),
):
    try:
        return {"success": True, "data": imdb_service.get_rating(title, year)}
    except Exception as e:
        raise handle_exception(e, "Помилка при отриманні даних з IMDb")
