import logging
import re
from typing import Dict, List, Optional

import requests

from app.core.config import get_settings
from app.core.interfaces import TMDBError
from app.core.services.movie_service import MovieService

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 3

# 1. "Title" (2010), straight or curly quotes
QUOTED_ITEM = re.compile(r'\d+\.\s+["“”]([^"“”]+)["“”](?:\s+\((\d{4})\))?', re.S)
NUMBERED_LINE = re.compile(r'^\s*\d+\.\s+["“”]?([^"“”(]+?)["“”]?(?:\s+\((\d{4})\))?\s*$')

GENRE_FALLBACKS: Dict[str, List[Dict[str, str]]] = {
    "Драма": [
        {"title": "Втеча з Шоушенка", "year": "1994"},
        {"title": "Форрест Гамп", "year": "1994"},
        {"title": "Зелена миля", "year": "1999"},
    ],
    "Комедія": [
        {"title": "Суперперці", "year": "2007"},
        {"title": "Похмілля у Вегасі", "year": "2009"},
        {"title": "Великий Лебовскі", "year": "1998"},
    ],
    "Бойовик": [
        {"title": "Джон Вік", "year": "2014"},
        {"title": "Матриця", "year": "1999"},
        {"title": "Темний лицар", "year": "2008"},
    ],
    "Жахи": [
        {"title": "Сяйво", "year": "1980"},
        {"title": "Спадковість", "year": "2018"},
        {"title": "Екзорцист", "year": "1973"},
    ],
}

MIXED_FALLBACK = [
    {"title": "Початок", "year": "2010"},
    {"title": "Володар перснів: Хранителі персня", "year": "2001"},
    {"title": "Кримінальне чтиво", "year": "1994"},
    {"title": "Бійцівський клуб", "year": "1999"},
    {"title": "Інтерстеллар", "year": "2014"},
]


def parse_recommendations(text: str) -> List[Dict[str, Optional[str]]]:
    """Extract up to three numbered `"Title" (Year)` items from model output"""
    recommendations = [
        {"title": title.strip(), "year": year or None}
        for title, year in QUOTED_ITEM.findall(text)
        if title.strip()
    ]
    if not recommendations:
        for line in text.splitlines():
            match = NUMBERED_LINE.match(line)
            if match and match.group(1).strip():
                recommendations.append({"title": match.group(1).strip(), "year": match.group(2)})
    return recommendations[:MAX_RECOMMENDATIONS]


def fallback_recommendations(genres: Optional[List[str]]) -> List[Dict[str, Optional[str]]]:
    """Canned suggestions for the movie's genres, or a mixed list"""
    picks = [item for genre in genres or [] for item in GENRE_FALLBACKS.get(genre, [])]
    if not picks:
        picks = MIXED_FALLBACK
    unique = {}
    for item in picks:
        unique.setdefault(item["title"], item)
    return [dict(item) for item in list(unique.values())[:MAX_RECOMMENDATIONS]]


class LLMRecommendationService:
    """Movie suggestions from a Hugging Face text model, resolved against TMDB"""

    def __init__(self, movie_service: MovieService, session: Optional[requests.Session] = None):
        settings = get_settings()
        self.movie_service = movie_service
        self.session = session or requests.Session()
        self.api_url = settings.HUGGINGFACE_API_URL.rstrip("/")
        self.api_key = settings.HUGGINGFACE_API_KEY

    def _generate(self, model: str, prompt: str) -> str:
        response = self.session.post(
            f"{self.api_url}/{model}",
            headers={"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"},
            json={
                "inputs": prompt,
                "parameters": {"max_new_tokens": 1024, "temperature": 0.7, "top_p": 0.9, "do_sample": True},
            },
            timeout=60,
        )
        if not response.ok:
            raise RuntimeError(f"Hugging Face API error: {response.status_code} {response.text}")

        data = response.json()
        if isinstance(data, list) and data and isinstance(data[0], dict) and data[0].get("generated_text"):
            return data[0]["generated_text"]
        if isinstance(data, dict) and data.get("generated_text"):
            return data["generated_text"]
        if isinstance(data, str):
            return data
        raise RuntimeError("Unknown response format")

    def _suggest(self, model: str, prompt: str, genres: Optional[List[str]]) -> List[Dict[str, Optional[str]]]:
        try:
            parsed = parse_recommendations(self._generate(model, prompt))
        except (requests.RequestException, RuntimeError, ValueError) as e:
            logger.error(f"Hugging Face request failed, using fallback suggestions: {str(e)}")
            return fallback_recommendations(genres)
        if not parsed:
            logger.warning("No recommendations could be parsed from the model output, using fallback suggestions")
            return fallback_recommendations(genres)
        return parsed

    def _resolve(self, recommendation: Dict[str, Optional[str]]) -> dict:
        """Attach the best TMDB match, preferring one released in the suggested year"""
        query = f"{recommendation['title']} {recommendation.get('year') or ''}".strip()
        try:
            resp = self.movie_service.search_movies(query, 1)
        except TMDBError as e:
            logger.error(f"TMDB search for '{query}' failed: {e.message}")
            return {**recommendation, "notFound": True}

        results = resp.data.get("results", []) if resp.success else []
        if not results:
            logger.info(f"'{recommendation['title']}' not found on TMDB")
            return {**recommendation, "notFound": True}

        best = results[0]
        year = recommendation.get("year")
        if year:
            best = next(
                (movie for movie in results if (movie.get("release_date") or "").startswith(year)),
                best,
            )
        return {**recommendation, "tmdbMovie": best}

    def recommend(
        self,
        model: str,
        prompt: str,
        movie_id: Optional[int] = None,
        movie_title: Optional[str] = None,
        genres: Optional[List[str]] = None,
    ) -> List[dict]:
        logger.info(f"Recommendations for {movie_title} (ID: {movie_id}) using {model}")
        return [self._resolve(item) for item in self._suggest(model, prompt, genres)]
