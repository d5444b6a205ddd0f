from fastapi import APIRouter, Depends

from app.core.exceptions import ValidationException, handle_exception
from app.core.services.movie_service import MovieService
from app.core.tmdb_service import get_movie_service
from app.schemas.streaming import RecommendationListResponse, RecommendationRequest
from app.services.recommendation_service import LLMRecommendationService

router = APIRouter(prefix="/api/llm", tags=["recommendations"])


def get_recommendation_service(
    movie_service: MovieService = Depends(get_movie_service),
) -> LLMRecommendationService:
    return LLMRecommendationService(movie_service)


@router.post("/recommendations", response_model=RecommendationListResponse, response_model_exclude_none=True)
def get_llm_recommendations(
    request: RecommendationRequest,
    recommendation_service: LLMRecommendationService = Depends(get_recommendation_service),
):
    """Movies similar to the given one, suggested by a language model"""
    try:
        if not request.model or not request.prompt:
            raise ValidationException("Модель та промпт обов'язкові")
        recommendations = recommendation_service.recommend(
            request.model,
            request.prompt,
            movie_id=request.movieId,
            movie_title=request.movieTitle,
            genres=request.genres,
        )
        return {"recommendations": recommendations}
    except Exception as e:
        raise handle_exception(e, "Не вдалося отримати рекомендації")
