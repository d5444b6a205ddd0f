import json
import logging
import os
import random
import threading
import time
from typing import Dict, List, Optional

import requests

from app.core.config import get_settings
from app.scrapers.base import DEFAULT_HEADERS

logger = logging.getLogger(__name__)

PROBE_URL = "https://www.google.com"
PROBE_TIMEOUT = 5
MAX_PROBES = 10

FALLBACK_PROXIES: List[Dict] = [
    {"ip": "185.162.230.245", "port": 80, "protocol": "http"},
    {"ip": "47.89.185.178", "port": 8888, "protocol": "http"},
    {"ip": "223.241.77.171", "port": 3128, "protocol": "http"},
    {"ip": "43.132.178.167", "port": 9480, "protocol": "http"},
    {"ip": "112.194.142.135", "port": 9091, "protocol": "http"},
    {"ip": "185.194.12.133", "port": 8080, "protocol": "http"},
    {"ip": "120.79.43.175", "port": 3128, "protocol": "http"},
    {"ip": "194.147.58.126", "port": 8000, "protocol": "http"},
    {"ip": "47.254.47.61", "port": 8080, "protocol": "http"},
    {"ip": "77.233.5.68", "port": 55443, "protocol": "http"},
]


def _parse_geonode(body: str) -> List[Dict]:
    return [
        {
            "ip": proxy["ip"],
            "port": int(proxy["port"]),
            "protocol": proxy["protocols"][0],
            "country": proxy.get("country"),
            "anonymity": proxy.get("anonymityLevel"),
            "lastChecked": proxy.get("lastChecked"),
        }
        for proxy in json.loads(body)["data"]
    ]


def _parse_plain_list(body: str) -> List[Dict]:
    proxies = []
    for line in body.splitlines():
        line = line.strip()
        if not line or ":" not in line:
            continue
        ip, port = line.split(":", 1)
        proxies.append({"ip": ip, "port": int(port), "protocol": "http"})
    return proxies


def _parse_proxyscan(body: str) -> List[Dict]:
    return [
        {
            "ip": proxy["Ip"],
            "port": int(proxy["Port"]),
            "protocol": proxy["Type"][0].lower(),
            "country": proxy.get("Country"),
            "anonymity": proxy.get("Anonymity"),
        }
        for proxy in json.loads(body)
    ]


PROXY_SOURCES: List[tuple] = [
    (
        "https://proxylist.geonode.com/api/proxy-list?limit=500&page=1"
        "&sort_by=lastChecked&sort_type=desc&protocols=http,https",
        _parse_geonode,
    ),
    ("https://www.proxy-list.download/api/v1/get?type=http", _parse_plain_list),
    ("https://www.proxyscan.io/api/proxy?format=json&type=http,https&limit=100", _parse_proxyscan),
]


def proxy_url(proxy: Dict) -> str:
    return f"{proxy['protocol']}://{proxy['ip']}:{proxy['port']}"


class ProxyPool:
    """Free public proxies, cached in a JSON file for a few hours"""

    def __init__(
        self,
        cache_file: Optional[str] = None,
        ttl_hours: Optional[int] = None,
        session: Optional[requests.Session] = None,
        sources: Optional[List[tuple]] = None,
    ):
        settings = get_settings()
        self.cache_file = cache_file or settings.PROXY_CACHE_FILE
        self.ttl_seconds = (ttl_hours if ttl_hours is not None else settings.PROXY_CACHE_TTL_HOURS) * 3600
        # None means every call opens its own session
        self.session = session
        self.sources = PROXY_SOURCES if sources is None else sources
        self._lock = threading.Lock()

    def _get(self, url: str, **kwargs) -> requests.Response:
        if self.session is not None:
            return self.session.get(url, **kwargs)
        with requests.Session() as session:
            return session.get(url, **kwargs)

    def _cache_is_fresh(self) -> bool:
        if not os.path.exists(self.cache_file):
            return False
        return time.time() - os.path.getmtime(self.cache_file) < self.ttl_seconds

    def _read_cache(self) -> Optional[List[Dict]]:
        try:
            with open(self.cache_file, "r", encoding="utf-8") as f:
                proxies = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read proxy cache {self.cache_file}: {str(e)}")
            return None
        logger.info(f"Using {len(proxies)} cached proxies")
        return proxies

    def _write_cache(self, proxies: List[Dict]) -> None:
        try:
            directory = os.path.dirname(self.cache_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.cache_file, "w", encoding="utf-8") as f:
                json.dump(proxies, f)
        except OSError as e:
            logger.warning(f"Could not write proxy cache {self.cache_file}: {str(e)}")

    def _download(self) -> List[Dict]:
        proxies: List[Dict] = []
        for url, parser in self.sources:
            try:
                response = self._get(url, headers={"User-Agent": DEFAULT_HEADERS["User-Agent"]}, timeout=10)
                if not response.ok:
                    logger.error(f"Proxy source {url} answered {response.status_code}")
                    continue
                fetched = parser(response.text)
                logger.info(f"Fetched {len(fetched)} proxies from {url}")
                proxies.extend(fetched)
            except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as e:
                logger.error(f"Failed to fetch proxies from {url}: {str(e)}")
        return proxies

    def refresh(self) -> List[Dict]:
        """Download a fresh list, falling back to the static one"""
        with self._lock:
            logger.info("Refreshing the free proxy list")
            proxies = self._download()
            if not proxies:
                logger.info("Using the fallback proxy list")
                proxies = list(FALLBACK_PROXIES)
            self._write_cache(proxies)
            return proxies

    def get_proxies(self) -> List[Dict]:
        if self._cache_is_fresh():
            cached = self._read_cache()
            if cached:
                return cached
        return self.refresh()

    def random_proxy(self, protocol: str = "http") -> Optional[str]:
        proxies = self.get_proxies()
        if not proxies:
            return None
        matching = [p for p in proxies if str(p.get("protocol", "")).lower() == protocol]
        if not matching:
            logger.warning(f"No {protocol} proxies available, using any protocol")
            matching = proxies
        return proxy_url(random.choice(matching))

    def test_proxy(self, url: str) -> bool:
        try:
            response = self._get(
                PROBE_URL,
                proxies={"http": url, "https": url},
                headers={"User-Agent": DEFAULT_HEADERS["User-Agent"]},
                timeout=PROBE_TIMEOUT,
            )
            return response.ok
        except requests.RequestException as e:
            logger.info(f"Proxy {url} failed the probe: {str(e)}")
            return False

    def working_proxy(self) -> Optional[str]:
        """Probe up to ten shuffled proxies and return the first that answers"""
        proxies = list(self.get_proxies())
        random.shuffle(proxies)
        for proxy in proxies[:MAX_PROBES]:
            url = proxy_url(proxy)
            if self.test_proxy(url):
                logger.info(f"Found a working proxy: {url}")
                return url
        logger.warning("No working proxy found after probing")
        return None


_pool: Optional[ProxyPool] = None

def get_proxy_pool() -> ProxyPool:
    """Get proxy pool singleton instance"""
    global _pool
    if _pool is None:
        _pool = ProxyPool()
    return _pool
