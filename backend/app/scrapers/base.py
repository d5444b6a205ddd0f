import logging
import re
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Callable, List, Optional

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "uk,en-US;q=0.7,en;q=0.3",
}

YEAR_IN_TITLE = re.compile(r"\((\d{4})\)")


@dataclass
class SourceResult:
    """Outcome of searching one streaming site"""
    found: bool
    url: Optional[str] = None
    title: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class Candidate:
    url: Optional[str]
    title: Optional[str]

    @property
    def year(self) -> Optional[str]:
        match = YEAR_IN_TITLE.search(self.title or "")
        return match.group(1) if match else None


# Matching strategies

def best_score_match(candidates: List[Candidate], title: str, year: Optional[str]) -> SourceResult:
    """Rank candidates: exact 100, contains query 75, contained in query 50, +25 for the year"""
    query = title.lower()
    best, best_score = None, 0
    for candidate in candidates:
        clean_title = YEAR_IN_TITLE.sub("", candidate.title or "", count=1).strip().lower()
        score = 0
        if clean_title == query:
            score += 100
        elif query in clean_title:
            score += 75
        elif clean_title in query:
            score += 50
        if year and candidate.year == year:
            score += 25
        # stable: the first of equally scored candidates wins
        if score > best_score:
            best, best_score = candidate, score

    if best is not None and best.url:
        return SourceResult(found=True, url=best.url, title=best.title)
    return SourceResult(found=False)


def first_substring_match(candidates: List[Candidate], title: str, year: Optional[str]) -> SourceResult:
    """First candidate whose title contains the query and whose year does not contradict it"""
    query = title.lower()
    for candidate in candidates:
        candidate_title = candidate.title or ""
        year_matches = not year or not candidate.year or candidate.year == year
        if query in candidate_title.lower() and year_matches and candidate.url:
            return SourceResult(found=True, url=candidate.url, title=candidate_title)
    return SourceResult(found=False)


def first_result(candidates: List[Candidate], title: str, year: Optional[str]) -> SourceResult:
    if candidates and (candidates[0].url or candidates[0].title):
        return SourceResult(found=True, url=candidates[0].url, title=candidates[0].title)
    return SourceResult(found=False)


class StreamingSource(ABC):
    """One Ukrainian streaming site that can be searched by movie title"""

    name: str = ""
    label: str = ""
    base_url: str = ""
    needs_proxy: bool = False
    timeout: Optional[int] = None
    match: Callable[[List[Candidate], str, Optional[str]], SourceResult] = staticmethod(first_result)

    def __init__(self, fetcher, timeout: int = 15, retries: int = 2):
        self.fetcher = fetcher
        self.default_timeout = timeout
        self.retries = retries

    @abstractmethod
    def request_for(self, title: str) -> dict:
        """Keyword arguments for the fetcher: method, url and optionally data/headers"""

    @abstractmethod
    def extract_candidates(self, soup: BeautifulSoup) -> List[Candidate]:
        pass

    def headers(self) -> dict:
        return {**DEFAULT_HEADERS, "Referer": self.base_url}

    def search(self, title: str, year: Optional[str] = None) -> SourceResult:
        request = self.request_for(title)
        logger.info(f"Searching {self.label or self.name}: {request['url']}")
        try:
            response = self.fetcher.fetch(
                request.pop("method", "GET"),
                request.pop("url"),
                use_proxy=self.needs_proxy,
                retries=self.retries,
                timeout=self.timeout or self.default_timeout,
                headers=request.pop("headers", self.headers()),
                **request,
            )
            if not response.ok:
                raise RuntimeError(f"{self.label or self.name} request failed: {response.status_code}")

            soup = BeautifulSoup(response.text, "html.parser")
            return self.match(self.extract_candidates(soup), title, year)
        except Exception as e:
            logger.error(f"Search on {self.name} failed: {str(e)}")
            return SourceResult(found=False, error=str(e))


def text_of(element) -> str:
    return element.get_text().strip() if element is not None else ""


def href_of(element) -> Optional[str]:
    return element.get("href") if element is not None else None
