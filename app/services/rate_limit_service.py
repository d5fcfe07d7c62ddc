# app/services/rate_limit_service.py
import redis

from app.domain.errors import RateLimitExceededError
from app.utils.retry import redis_retry
from app.utils.settings import REDIS_URL, RATE_LIMIT_PER_MINUTE
from app.utils.logging import get_logger

logger = get_logger(__name__)

#INCR i EXPIRE w jednym skrypcie, licznik nigdy nie zostaje bez TTL
_HIT_LUA = """
local current = redis.call('INCR', KEYS[1])
if current == 1 then
    redis.call('EXPIRE', KEYS[1], ARGV[1])
end
return {current, redis.call('TTL', KEYS[1])}
"""


class RateLimitService:
    """Okno stale: limit zapytan na uzytkownika i zakres (cart, checkout)."""

    def __init__(
        self,
        url: str | None = None,
        limit: int = RATE_LIMIT_PER_MINUTE,
        window_seconds: int = 60,
        client: redis.Redis | None = None,
    ):
        self.redis = client or redis.Redis.from_url(url or REDIS_URL, decode_responses=True)
        self.limit = limit
        self.window_seconds = window_seconds

    @redis_retry()
    def hit(self, scope: str, user_id: str) -> int:
        key = f"ratelimit:{scope}:{user_id}"
        current, ttl = self.redis.eval(_HIT_LUA, 1, key, self.window_seconds)
        current = int(current)

        if current > self.limit:
            retry_after = int(ttl) if int(ttl) > 0 else self.window_seconds
            logger.warning(f"Rate limit exceeded for {key}: {current}/{self.limit}")
            raise RateLimitExceededError(retry_after=retry_after)

        return self.limit - current
