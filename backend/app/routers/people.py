from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.exceptions import ValidationException
from app.core.services.person_service import PersonService
from app.core.tmdb_service import get_person_service, unwrap
from app.routers.movies import tmdb_errors

router = APIRouter(prefix="/api", tags=["people"])


@router.get("/person/{person_id}")
def get_person_details(person_id: int, person_service: PersonService = Depends(get_person_service)):
    try:
        return unwrap(person_service.get_person_details(person_id), "Person not found")
    except Exception as e:
        raise tmdb_errors(e, "Failed to fetch person details")


@router.get("/person/{person_id}/credits")
def get_person_credits(person_id: int, person_service: PersonService = Depends(get_person_service)):
    try:
        return unwrap(person_service.get_person_movie_credits(person_id), "Person not found")
    except Exception as e:
        raise tmdb_errors(e, "Failed to fetch person credits")


@router.get("/actors/popular")
def get_popular_actors(
    page: int = Query(1, ge=1, description="Page number"),
    person_service: PersonService = Depends(get_person_service),
):
    try:
        return unwrap(person_service.get_popular_people(page))
    except Exception as e:
        raise tmdb_errors(e, "Failed to fetch popular actors")


@router.get("/actors/search")
def search_actors(
    query: Optional[str] = Query(None, description="Search query"),
    page: int = Query(1, ge=1, description="Page number"),
    person_service: PersonService = Depends(get_person_service),
):
    try:
        if not query or not query.strip():
            raise ValidationException("Query parameter is required")
        return unwrap(person_service.search_people(query.strip(), page))
    except Exception as e:
        raise tmdb_errors(e, "Failed to fetch actors")
