import json
import logging
import zlib
from typing import Any, Optional
import redis
from .config import get_settings

logger = logging.getLogger(__name__)


class CacheService:
    """Redis JSON cache (optionally zlib-compressed); any Redis failure is a miss"""

    def __init__(self, url: Optional[str] = None, compress: bool = True, enabled: Optional[bool] = None):
        settings = get_settings()
        self.enabled = settings.CACHE_ENABLED if enabled is None else enabled
        self.default_ttl = settings.CACHE_TTL_SECONDS
        self.redis = redis.Redis.from_url(url or settings.REDIS_URL, decode_responses=False) if self.enabled else None
        self.compress = compress

    def get_json(self, key: str) -> Optional[Any]:
        if not self.enabled:
            return None
        try:
            data = self.redis.get(key)
        except redis.RedisError as e:
            logger.warning(f"Cache read failed for {key}: {str(e)}")
            return None
        if data is None:
            return None
        if self.compress:
            try:
                data = zlib.decompress(data)
            except zlib.error:
                pass
        try:
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            return json.loads(data)
        except ValueError:
            return None

    def set_json(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> bool:
        if not self.enabled:
            return False
        raw = json.dumps(value, ensure_ascii=False).encode("utf-8")
        payload = zlib.compress(raw) if self.compress else raw
        try:
            self.redis.setex(key, ttl_seconds or self.default_ttl, payload)
        except redis.RedisError as e:
            logger.warning(f"Cache write failed for {key}: {str(e)}")
            return False
        return True

    def delete(self, key: str) -> int:
        if not self.enabled:
            return 0
        try:
            return int(self.redis.delete(key))
        except redis.RedisError:
            return 0
