from unittest.mock import MagicMock

import pytest

from app.domain.errors import RateLimitExceededError
from app.services.lock_service import LockService
from app.services.rate_limit_service import RateLimitService


def test_acquire_checkout_lock_uses_set_nx_with_ttl():
    client = MagicMock()
    client.set.return_value = True
    locks = LockService(client=client)

    assert locks.acquire_checkout_lock("u1", "token-1", ttl=30) is True
    client.set.assert_called_once_with(name="checkout:u1:lock", value="token-1", nx=True, ex=30)


def test_acquire_checkout_lock_fails_when_held():
    client = MagicMock()
    client.set.return_value = None
    locks = LockService(client=client)

    assert locks.acquire_checkout_lock("u1", "token-1") is False


def test_release_checkout_lock_compares_token():
    client = MagicMock()
    client.eval.return_value = 0
    locks = LockService(client=client)

    assert locks.release_checkout_lock("u1", "token-1") is False
    script, numkeys, key, token = client.eval.call_args.args
    assert numkeys == 1
    assert key == "checkout:u1:lock"
    assert token == "token-1"
    assert "DEL" in script


def test_new_tokens_are_unique():
    assert LockService.new_token() != LockService.new_token()


def test_rate_limit_under_limit_returns_remaining():
    client = MagicMock()
    client.eval.return_value = [1, 60]
    limiter = RateLimitService(limit=60, client=client)

    assert limiter.hit("cart", "u1") == 59
    assert client.eval.call_args.args[2] == "ratelimit:cart:u1"


def test_rate_limit_exceeded_reports_retry_after():
    client = MagicMock()
    client.eval.return_value = [61, 42]
    limiter = RateLimitService(limit=60, client=client)

    with pytest.raises(RateLimitExceededError) as exc:
        limiter.hit("checkout", "u1")

    assert exc.value.retry_after == 42
    assert exc.value.status_code == 429


def test_rate_limit_without_ttl_falls_back_to_window():
    client = MagicMock()
    client.eval.return_value = [5, -1]
    limiter = RateLimitService(limit=2, window_seconds=60, client=client)

    with pytest.raises(RateLimitExceededError) as exc:
        limiter.hit("cart", "u1")

    assert exc.value.retry_after == 60
