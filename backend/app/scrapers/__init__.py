from .base import SourceResult, StreamingSource, Candidate
from .fetcher import ProxyFetcher
from .proxies import ProxyPool, get_proxy_pool
from .sites import SOURCE_CLASSES

__all__ = [
    "SourceResult", "StreamingSource", "Candidate",
    "ProxyFetcher", "ProxyPool", "get_proxy_pool", "SOURCE_CLASSES",
]
