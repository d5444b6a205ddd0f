import logging
from typing import Optional

import requests

from app.scrapers.proxies import ProxyPool

logger = logging.getLogger(__name__)

BLOCKED_STATUSES = (403, 429)


class ProxyBlockedError(requests.RequestException):
    """The target answered through a proxy with 403 or 429"""


class ProxyFetcher:
    """HTTP requests routed through free proxies with a direct-request fallback"""

    def __init__(self, pool: ProxyPool, session: Optional[requests.Session] = None):
        self.pool = pool
        self.session = session or requests.Session()

    def fetch(
        self,
        method: str,
        url: str,
        use_proxy: bool = True,
        retries: int = 2,
        timeout: int = 10,
        **kwargs,
    ) -> requests.Response:
        """Send the request, through a proxy when asked.

        The first attempt uses a probed proxy and later ones random proxies,
        `retries + 1` attempts in total. After that one direct request is made;
        if it fails too the last proxy error is raised.
        """
        if not use_proxy:
            return self.session.request(method, url, timeout=timeout, **kwargs)

        last_error: Optional[Exception] = None
        for attempt in range(retries + 1):
            proxy = self.pool.working_proxy() if attempt == 0 else self.pool.random_proxy("http")
            if not proxy:
                logger.info(f"No proxy available, attempt {attempt + 1}/{retries + 1}: direct request")
                return self.session.request(method, url, timeout=timeout, **kwargs)

            logger.info(f"Request via proxy {proxy}, attempt {attempt + 1}/{retries + 1}")
            try:
                response = self.session.request(
                    method, url, timeout=timeout, proxies={"http": proxy, "https": proxy}, **kwargs
                )
                if response.status_code in BLOCKED_STATUSES:
                    raise ProxyBlockedError(f"HTTP error {response.status_code}")
                return response
            except requests.RequestException as e:
                last_error = e
                logger.warning(f"Proxy request failed (attempt {attempt + 1}/{retries + 1}): {str(e)}")

        logger.info("All proxy attempts failed, trying a direct request")
        try:
            return self.session.request(method, url, timeout=timeout, **kwargs)
        except requests.RequestException:
            raise last_error
