"""
MockRedis — synchronous in-memory Redis stand-in for unit tests.

Supports: get, set, incr, expire, delete, ping.
Expiry is enforced lazily on read. Set `fail = True` to make every call raise,
which exercises the memory fallbacks.
"""

import time


class MockRedis:
    def __init__(self):
        self._store: dict[str, object] = {}
        self._expiry: dict[str, float] = {}
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise ConnectionError("mock redis unavailable")

    def _expired(self, key: str) -> bool:
        if key in self._expiry and time.time() > self._expiry[key]:
            self._store.pop(key, None)
            self._expiry.pop(key, None)
            return True
        return False

    def ping(self) -> bool:
        self._check()
        return True

    def get(self, key: str):
        self._check()
        if self._expired(key):
            return None
        return self._store.get(key)

    def set(self, key: str, value, ex: int | None = None, nx: bool = False) -> bool | None:
        self._check()
        if nx and key in self._store and not self._expired(key):
            return None
        self._store[key] = value
        if ex:
            self._expiry[key] = time.time() + ex
        return True

    def incr(self, key: str) -> int:
        self._check()
        val = int(self._store.get(key, 0)) + 1
        self._store[key] = str(val)
        return val

    def expire(self, key: str, seconds: int) -> int:
        self._check()
        if key in self._store:
            self._expiry[key] = time.time() + seconds
            return 1
        return 0

    def delete(self, key: str) -> int:
        self._check()
        existed = key in self._store
        self._store.pop(key, None)
        self._expiry.pop(key, None)
        return 1 if existed else 0
