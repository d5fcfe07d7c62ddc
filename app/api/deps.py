# app/api/deps.py
from fastapi import Depends, Header, HTTPException
from redis.exceptions import RedisError

from app.services.lock_service import LockService
from app.services.notification_service import NotificationService
from app.services.rate_limit_service import RateLimitService
from app.utils.settings import BACK_OFFICE_API_KEY
from app.utils.logging import get_logger

logger = get_logger(__name__)


def get_current_user_id(x_user_id: str | None = Header(None, alias="X-User-Id")) -> str:
    #tozsamosc ustawia bramka dostawcy logowania
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Authentication required")
    return x_user_id.strip()


def require_back_office(x_api_key: str | None = Header(None, alias="X-Api-Key")) -> None:
    if not BACK_OFFICE_API_KEY:
        raise HTTPException(status_code=403, detail="Back-office access is disabled")
    if x_api_key != BACK_OFFICE_API_KEY:
        raise HTTPException(status_code=403, detail="Invalid API key")


def get_lock_service() -> LockService:
    return LockService()


def get_notification_service() -> NotificationService:
    return NotificationService()


def get_rate_limiter() -> RateLimitService:
    return RateLimitService()


def rate_limit(scope: str):
    def dependency(
        user_id: str = Depends(get_current_user_id),
        limiter: RateLimitService = Depends(get_rate_limiter),
    ) -> None:
        try:
            limiter.hit(scope, user_id)
        except RedisError as e:
            #redis niedostepny, zapytanie przechodzi bez limitu
            logger.warning(f"Rate limiter unavailable for {scope}/{user_id}, request allowed: {e}")

    return dependency
