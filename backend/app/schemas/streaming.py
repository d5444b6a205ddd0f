from pydantic import BaseModel
from typing import Dict, List, Optional, Any


class SourceResultResponse(BaseModel):
    found: bool
    url: Optional[str] = None
    title: Optional[str] = None
    error: Optional[str] = None


class StreamingSearchResponse(BaseModel):
    query: str
    results: Dict[str, SourceResultResponse]


class ImdbRating(BaseModel):
    imdbId: str
    title: str
    year: str = ""
    rating: float
    votes: int = 0
    poster: str = ""


class ImdbRatingResponse(BaseModel):
    success: bool = True
    data: ImdbRating


class RecommendationRequest(BaseModel):
    model: Optional[str] = None
    prompt: Optional[str] = None
    movieId: Optional[int] = None
    movieTitle: Optional[str] = None
    genres: Optional[List[str]] = None


class Recommendation(BaseModel):
    title: str
    year: Optional[str] = None
    tmdbMovie: Optional[Dict[str, Any]] = None
    notFound: Optional[bool] = None


class RecommendationListResponse(BaseModel):
    recommendations: List[Recommendation]
