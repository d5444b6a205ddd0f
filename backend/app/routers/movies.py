import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.exceptions import ValidationException, handle_exception
from app.core.interfaces import TMDBError
from app.core.services.movie_service import MovieService
from app.core.tmdb_service import as_app_exception, get_movie_service, unwrap

router = APIRouter(prefix="/api/movies", tags=["movies"])
logger = logging.getLogger(__name__)


def tmdb_errors(e: Exception, fallback_message: str):
    if isinstance(e, TMDBError):
        return handle_exception(as_app_exception(e))
    return handle_exception(e, fallback_message)


@router.get("/search")
def search_movies(
    query: Optional[str] = Query(None, description="Search query"),
    page: int = Query(1, ge=1, description="Page number"),
    movie_service: MovieService = Depends(get_movie_service),
):
    try:
        if not query or not query.strip():
            raise ValidationException("Query parameter is required")
        return unwrap(movie_service.search_movies(query.strip(), page))
    except Exception as e:
        raise tmdb_errors(e, "Failed to search movies")


@router.get("/popular")
def get_popular_movies(
    page: int = Query(1, ge=1, description="Page number"),
    movie_service: MovieService = Depends(get_movie_service),
):
    try:
        return unwrap(movie_service.get_popular_movies(page))
    except Exception as e:
        raise tmdb_errors(e, "Failed to fetch popular movies")


@router.get("/now-playing")
def get_now_playing_movies(
    page: int = Query(1, ge=1, description="Page number"),
    movie_service: MovieService = Depends(get_movie_service),
):
    try:
        return unwrap(movie_service.get_now_playing(page))
    except Exception as e:
        raise tmdb_errors(e, "Failed to fetch now playing movies")


@router.get("/random")
def get_random_movie(
    min_rating: float = Query(0, ge=0, le=10, alias="minRating"),
    max_rating: float = Query(10, ge=0, le=10, alias="maxRating"),
    min_year: int = Query(1900, alias="minYear"),
    max_year: Optional[int] = Query(None, alias="maxYear"),
    language: Optional[str] = Query(None),
    include_adult: bool = Query(False, alias="includeAdult"),
    genre: Optional[str] = Query(None),
    movie_service: MovieService = Depends(get_movie_service),
):
    """Random movie with a poster for the discover page"""
    try:
        return movie_service.get_random_movie(
            min_rating=min_rating,
            max_rating=max_rating,
            min_year=min_year,
            max_year=max_year,
            language=language,
            include_adult=include_adult,
            genre=genre,
        )
    except Exception as e:
        raise tmdb_errors(e, "Failed to fetch a random movie")


@router.get("/{movie_id}")
def get_movie_details(movie_id: int, movie_service: MovieService = Depends(get_movie_service)):
    try:
        return unwrap(movie_service.get_movie_details(movie_id), "Movie not found")
    except Exception as e:
        raise tmdb_errors(e, "Failed to fetch movie details")


@router.get("/{movie_id}/credits")
def get_movie_credits(movie_id: int, movie_service: MovieService = Depends(get_movie_service)):
    try:
        return unwrap(movie_service.get_movie_credits(movie_id), "Movie not found")
    except Exception as e:
        raise tmdb_errors(e, "Failed to fetch movie credits")


@router.get("/{movie_id}/images")
def get_movie_images(movie_id: int, movie_service: MovieService = Depends(get_movie_service)):
    try:
        return unwrap(movie_service.get_movie_images(movie_id), "Movie not found")
    except Exception as e:
        raise tmdb_errors(e, "Failed to fetch movie images")


@router.get("/{movie_id}/videos")
def get_movie_videos(movie_id: int, movie_service: MovieService = Depends(get_movie_service)):
    try:
        return unwrap(movie_service.get_movie_videos(movie_id), "Movie not found")
    except Exception as e:
        raise tmdb_errors(e, "Failed to fetch movie videos")


@router.get("/{movie_id}/providers")
def get_movie_providers(
    movie_id: int,
    region: Optional[str] = Query(None, description="Two-letter country code, e.g. UA"),
    movie_service: MovieService = Depends(get_movie_service),
):
    """Where to watch the movie, optionally only for one country"""
    try:
        return unwrap(movie_service.get_movie_watch_providers(movie_id, region), "Movie not found")
    except Exception as e:
        raise tmdb_errors(e, "Failed to fetch movie providers")


@router.get("/{movie_id}/translations")
def get_movie_translations(movie_id: int, movie_service: MovieService = Depends(get_movie_service)):
    try:
        return unwrap(movie_service.get_movie_translations(movie_id), "Movie not found")
    except Exception as e:
        raise tmdb_errors(e, "Failed to fetch movie translations")
