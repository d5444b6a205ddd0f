from typing import List
from urllib.parse import quote

from bs4 import BeautifulSoup

from app.scrapers.base import (
    Candidate, DEFAULT_HEADERS, StreamingSource,
    best_score_match, first_substring_match, href_of, text_of
)


def dle_search_url(base_url: str, title: str, **extra) -> str:
    """Search URL of a DataLife Engine site"""
    params = "".join(f"&{key}={value}" for key, value in extra.items())
    return f"{base_url}index.php?do=search&subaction=search{params}&story={quote(title.lower(), safe='')}"


class UakinoSource(StreamingSource):
    name = "uakino"
    label = "UAKino"
    base_url = "https://uakino.me/"
    needs_proxy = True
    match = staticmethod(first_substring_match)

    def request_for(self, title: str) -> dict:
        return {
            "method": "POST",
            "url": "https://uakino.me/index.php?do=search",
            "data": {"do": "search", "subaction": "search", "from_page": "0", "story": title.lower()},
            "headers": {**self.headers(), "Content-Type": "application/x-www-form-urlencoded"},
        }

    def extract_candidates(self, soup: BeautifulSoup) -> List[Candidate]:
        return [
            Candidate(url=href_of(item.select_one("a")), title=text_of(item.select_one(".movie-title")))
            for item in soup.select(".movie-item")
        ]


class EneyidaSource(StreamingSource):
    name = "eneyida"
    label = "Eneyida"
    base_url = "https://eneyida.tv/"
    needs_proxy = True
    match = staticmethod(best_score_match)

    def request_for(self, title: str) -> dict:
        return {
            "method": "GET",
            "url": dle_search_url(self.base_url, title, search_start=0, full_search=0),
        }

    def extract_candidates(self, soup: BeautifulSoup) -> List[Candidate]:
        return [
            Candidate(url=href_of(item.select_one("a")), title=text_of(item.select_one(".short_title")))
            for item in soup.select("#dle-content .related_item")
        ]


class LavakinoSource(StreamingSource):
    name = "lavakino"
    label = "LavaKino"
    base_url = "https://lavakino.cc/"
    needs_proxy = True

    def request_for(self, title: str) -> dict:
        return {
            "method": "POST",
            "url": self.base_url,
            "data": {"do": "search", "subaction": "search", "story": title.lower()},
            "headers": {**self.headers(), "Content-Type": "application/x-www-form-urlencoded"},
        }

    def extract_candidates(self, soup: BeautifulSoup) -> List[Candidate]:
        candidates = []
        for item in soup.select("#dle-content .short"):
            link = item.select_one(".short-title")
            candidates.append(Candidate(url=href_of(link), title=text_of(link)))
        return candidates


class UaserialsSource(StreamingSource):
    name = "uaserials"
    label = "UASerials"
    base_url = "https://uaserials.pro/"

    def headers(self) -> dict:
        return dict(DEFAULT_HEADERS)

    def request_for(self, title: str) -> dict:
        return {
            "method": "GET",
            "url": dle_search_url(self.base_url, title, search_start=0, full_search=0),
        }

    def extract_candidates(self, soup: BeautifulSoup) -> List[Candidate]:
        return [
            Candidate(url=href_of(item.select_one("a")), title=text_of(item.select_one(".th-title")))
            for item in soup.select("#dle-content .short-item")
        ]


class UafixSource(StreamingSource):
    name = "uafix"
    label = "UAFix"
    base_url = "https://uafix.net/"
    timeout = 12

    def request_for(self, title: str) -> dict:
        return {"method": "GET", "url": dle_search_url(self.base_url, title)}

    def extract_candidates(self, soup: BeautifulSoup) -> List[Candidate]:
        return [
            Candidate(url=href_of(link), title=text_of(link.select_one(".sres-text h2")))
            for link in soup.select("#dle-content > a")
        ]


class KinogoSource(StreamingSource):
    name = "kinogo"
    label = "Kinogo"
    base_url = "https://ua.kinogo.online"
    timeout = 12

    def request_for(self, title: str) -> dict:
        return {"method": "GET", "url": f"{self.base_url}/search/{quote(title.lower(), safe='')}"}

    def extract_candidates(self, soup: BeautifulSoup) -> List[Candidate]:
        candidates = []
        for story in soup.select("#dle-content > .shortStory"):
            link = story.select_one("a")
            candidates.append(Candidate(url=href_of(link), title=text_of(link)))
        return candidates


# Search order when no single service is requested
SOURCE_CLASSES = [
    UakinoSource,
    EneyidaSource,
    UaserialsSource,
    UafixSource,
    LavakinoSource,
    KinogoSource,
]

