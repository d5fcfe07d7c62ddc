# app/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
from sqlalchemy.exc import OperationalError
import redis


def _rollback_session(retry_state):
    #pierwszy argument to serwis, sesja musi byc wycofana przed ponowieniem
    service = retry_state.args[0]
    service.repo.rollback()


def db_retry():
    """
    Ponawia cala jednostke pracy (metoda serwisu) przy chwilowych bledach bazy.
    Przed kazda proba sesja jest wycofywana, wiec nic nie zostaje w polowie.
    """
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception_type(OperationalError),
        before_sleep=_rollback_session,
    )


def redis_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
    )
