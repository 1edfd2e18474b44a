import redis
from typing import Optional

from stockledger.config import get_settings

settings = get_settings()

# Create Redis client
redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)


class CounterUnavailableError(Exception):
    """Raised when the counter store cannot be reached."""
    pass


class CounterService:
    """
    Redis-backed named counters.

    Counters live in Redis so they survive process restarts and are shared
    by every server instance. INCR is atomic, so two instances asking for
    the next value never receive the same number.
    """

    KEY_PREFIX = "code_counter"

    def __init__(self, client: redis.Redis = None):
        self.client = client or redis_client

    def _make_key(self, name: str) -> str:
        """Create a namespaced counter key."""
        return f"{self.KEY_PREFIX}:{name}"

    def incr(self, name: str) -> int:
        """
        Atomically increment a counter and return the new value.

        Raises:
            CounterUnavailableError: If Redis cannot be reached
        """
        try:
            return int(self.client.incr(self._make_key(name)))
        except redis.RedisError as e:
            raise CounterUnavailableError(str(e)) from e

    def advance_to(self, name: str, value: int) -> None:
        """
        Move a counter forward to at least `value`. Never moves it backwards.

        Raises:
            CounterUnavailableError: If Redis cannot be reached
        """
        key = self._make_key(name)
        try:
            current = self.client.get(key)
            if current is None or int(current) < value:
                self.client.set(key, value)
        except redis.RedisError as e:
            raise CounterUnavailableError(str(e)) from e

    def current(self, name: str) -> Optional[int]:
        """Return the current value of a counter, or None if unset or unreachable."""
        try:
            value = self.client.get(self._make_key(name))
            return int(value) if value is not None else None
        except redis.RedisError:
            return None


# Singleton counter service instance
counter_service = CounterService()
