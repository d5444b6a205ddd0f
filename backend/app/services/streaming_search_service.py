import asyncio
import logging
from typing import Dict, List, Optional

from app.core.config import get_settings
from app.core.exceptions import ValidationException
from app.scrapers.base import SourceResult, StreamingSource
from app.scrapers.fetcher import ProxyFetcher
from app.scrapers.proxies import get_proxy_pool
from app.scrapers.sites import SOURCE_CLASSES

logger = logging.getLogger(__name__)


class StreamingSearchService:
    """Looks a movie up on Ukrainian streaming sites in parallel"""

    def __init__(self, sources: List[StreamingSource]):
        self.sources: Dict[str, StreamingSource] = {source.name: source for source in sources}

    @property
    def service_names(self) -> List[str]:
        return list(self.sources)

    async def search(self, title: Optional[str], year: Optional[str] = None, service: Optional[str] = None) -> dict:
        """Search every site, or just `service`; one site's failure never affects the others"""
        query = (title or "").strip()
        if not query:
            raise ValidationException("Назва фільму обов'язкова")
        if service and service not in self.sources:
            raise ValidationException(
                f"Unknown service '{service}'. Available: {', '.join(self.service_names)}"
            )

        names = [service] if service else self.service_names
        logger.info(f"Searching Ukrainian services for: {query} ({year or 'no year'})")

        loop = asyncio.get_event_loop()
        outcomes = await asyncio.gather(
            *[loop.run_in_executor(None, self.sources[name].search, query, year) for name in names],
            return_exceptions=True,
        )

        results = {}
        for name, outcome in zip(names, outcomes):
            if isinstance(outcome, Exception):
                logger.error(f"Search on {name} failed: {str(outcome)}")
                outcome = SourceResult(found=False, error=f"Search error: {str(outcome)}")
            results[name] = outcome.to_dict()
        return {"query": query, "results": results}


def build_default_sources() -> List[StreamingSource]:
    settings = get_settings()
    pool = get_proxy_pool()
    # one fetcher, and so one requests.Session, per source thread
    return [
        source_class(ProxyFetcher(pool), timeout=settings.SCRAPER_TIMEOUT, retries=settings.SCRAPER_RETRIES)
        for source_class in SOURCE_CLASSES
    ]


def get_streaming_search_service() -> StreamingSearchService:
    """FastAPI dependency"""
    return StreamingSearchService(build_default_sources())
