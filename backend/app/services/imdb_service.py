import logging
import re
from typing import Optional
from urllib.parse import quote

import requests
from bs4 import BeautifulSoup

from app.core.exceptions import NotFoundException, UpstreamServiceException, ValidationException
from app.scrapers.base import DEFAULT_HEADERS

logger = logging.getLogger(__name__)

IMDB_URL = "https://www.imdb.com"
TITLE_ID = re.compile(r"/title/(tt\d+)/")
YEAR = re.compile(r"(\d{4})")
RATING_OUT_OF_TEN = re.compile(r"(\d+\.\d+)/10")


def parse_vote_count(text: str) -> int:
    """Turn '1.2M', '950K' or '12,345' into an integer"""
    digits = re.sub(r"[^\d.]", "", text)
    if not digits:
        return 0
    try:
        if "K" in text:
            return round(float(digits) * 1000)
        if "M" in text:
            return round(float(digits) * 1000000)
        return int(float(digits))
    except ValueError:
        return 0


class ImdbRatingService:
    """Scrapes the IMDb rating of a movie found by title"""

    def __init__(self, session: Optional[requests.Session] = None, timeout: int = 15):
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get_html(self, url: str) -> str:
        try:
            response = self.session.get(
                url, headers={**DEFAULT_HEADERS, "Referer": f"{IMDB_URL}/"}, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"IMDb request to {url} failed: {str(e)}")
            raise UpstreamServiceException("Помилка при отриманні даних з IMDb")
        if not response.ok:
            logger.error(f"IMDb answered {response.status_code} for {url}")
            raise UpstreamServiceException("Помилка при отриманні даних з IMDb")
        return response.text

    def get_rating(self, title: Optional[str], year: Optional[str] = None) -> dict:
        title = (title or "").strip()
        if not title:
            raise ValidationException("Назва фільму обов'язкова")

        logger.info(f"Fetching IMDb rating for: {title} ({year or 'no year'})")
        search_url = f"{IMDB_URL}/find/?q={quote(title, safe='')}"
        if year:
            search_url += f"+{year}"

        search_page = BeautifulSoup(self._get_html(search_url), "html.parser")
        link = search_page.select_one('a[href*="/title/tt"]')
        if link is None:
            raise NotFoundException("Фільм не знайдено")

        href = link.get("href", "")
        match = TITLE_ID.search(href)
        if not match:
            raise NotFoundException("Не вдалося отримати ID фільму")

        result = {
            "imdbId": match.group(1),
            "title": link.get_text().strip(),
            "year": "",
            "rating": 0.0,
            "votes": 0,
            "poster": "",
        }

        page = BeautifulSoup(self._get_html(f"{IMDB_URL}{href}"), "html.parser")

        score = page.select_one('[data-testid="hero-rating-bar__aggregate-rating__score"]')
        if score is not None:
            rating_span = score.select_one("span")
            if rating_span is not None:
                try:
                    result["rating"] = float(rating_span.get_text().strip())
                except ValueError:
                    pass
            siblings = score.find_next_siblings(limit=2)
            if len(siblings) == 2:
                result["votes"] = parse_vote_count(siblings[1].get_text().strip())

        release = page.select_one('[data-testid="title-details-releasedate"] a')
        year_match = YEAR.search(release.get_text()) if release is not None else None
        if year_match:
            result["year"] = year_match.group(1)

        poster = page.select_one('[data-testid="hero-media__poster"] img')
        if poster is not None:
            result["poster"] = poster.get("src", "")

        if not result["rating"]:
            # Older page layout
            for span in page.select('[data-testid="hero-rating-bar__aggregate-rating"] span'):
                fallback = RATING_OUT_OF_TEN.search(span.get_text())
                if fallback:
                    result["rating"] = float(fallback.group(1))
                    break
        if not result["rating"]:
            raise NotFoundException("Рейтинг не знайдено")

        logger.info(f"IMDb rating for {result['imdbId']}: {result['rating']}/10 ({result['votes']} votes)")
        return result


def get_imdb_rating_service() -> ImdbRatingService:
    """FastAPI dependency"""
    return ImdbRatingService()
