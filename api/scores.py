"""Score persistence with Redis backend and in-memory fallback."""

import asyncio
import logging
from abc import ABC, abstractmethod

import redis.asyncio as redis
from redis.exceptions import RedisError

from config import config
from core.errors import PersistenceError

logger = logging.getLogger(__name__)


class ScoreStore(ABC):
    """
    Abstract score store keyed by player address.

    Subclasses implement ``_read``/``_write``; callers use ``get_score`` and
    ``put_score``, which bound each call by ``timeout`` and surface any
    failure as ``PersistenceError``.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout if timeout is not None else config.score_store.timeout

    @abstractmethod
    async def _read(self, address: str) -> int | None:
        """Read the stored score, None when absent."""
        ...

    @abstractmethod
    async def _write(self, address: str, score: int) -> None:
        """Write the score."""
        ...

    async def get_score(self, address: str) -> int | None:
        """
        Get a player's score.

        Raises:
            PersistenceError: If the store errors or times out
        """
        try:
            score = await asyncio.wait_for(self._read(address), self.timeout)
        except asyncio.TimeoutError as exc:
            logger.error("Timed out reading score for %s", address)
            raise PersistenceError("failed to read score") from exc
        except PersistenceError:
            logger.error("Error reading score for %s", address)
            raise
        except OSError as exc:
            logger.error("Error reading score for %s: %s", address, exc)
            raise PersistenceError("failed to read score") from exc

        if score is None:
            logger.debug("No score found for %s", address)
        else:
            logger.debug("Score for %s: %d", address, score)
        return score

    async def put_score(self, address: str, score: int) -> None:
        """
        Store a player's score.

        Raises:
            PersistenceError: If the store errors or times out
        """
        try:
            await asyncio.wait_for(self._write(address, score), self.timeout)
        except asyncio.TimeoutError as exc:
            logger.error("Timed out writing score %d for %s", score, address)
            raise PersistenceError() from exc
        except PersistenceError:
            logger.error("Error writing score %d for %s", score, address)
            raise
        except OSError as exc:
            logger.error("Error writing score %d for %s: %s", score, address, exc)
            raise PersistenceError() from exc

        logger.debug("Wrote score %d for %s", score, address)


class InMemoryScoreStore(ScoreStore):
    """In-memory score store for local development."""

    def __init__(self, timeout: float | None = None) -> None:
        super().__init__(timeout)
        self._scores: dict[str, int] = {}

    async def _read(self, address: str) -> int | None:
        return self._scores.get(address)

    async def _write(self, address: str, score: int) -> None:
        self._scores[address] = score


class RedisScoreStore(ScoreStore):
    """Redis-backed score store."""

    def __init__(
        self,
        redis_client: "redis.Redis",
        prefix: str | None = None,
        timeout: float | None = None,
    ) -> None:
        super().__init__(timeout)
        self._redis = redis_client
        self._prefix = prefix if prefix is not None else config.score_store.key_prefix

    def _key(self, address: str) -> str:
        """Get Redis key for a player's score."""
        return f"{self._prefix}{address}"

    async def _read(self, address: str) -> int | None:
        try:
            data = await self._redis.get(self._key(address))
        except RedisError as exc:
            raise PersistenceError("failed to read score") from exc
        if data is None:
            return None
        try:
            return int(data)
        except ValueError as exc:
            raise PersistenceError("failed to read score") from exc

    async def _write(self, address: str, score: int) -> None:
        try:
            await self._redis.set(self._key(address), score)
        except RedisError as exc:
            raise PersistenceError() from exc


# Global score store instance
_score_store: ScoreStore | None = None


async def get_score_store() -> ScoreStore:
    """Get or create the configured score store."""
    global _score_store

    if _score_store is not None:
        return _score_store

    if config.score_store.backend == "redis":
        redis_client = redis.from_url(config.redis.url)
        try:
            await asyncio.wait_for(redis_client.ping(), config.score_store.timeout)
        except (RedisError, OSError, asyncio.TimeoutError) as exc:
            logger.warning(
                "Redis unavailable at %s (%s); falling back to in-memory scores",
                config.redis.url,
                exc,
            )
        else:
            _score_store = RedisScoreStore(redis_client)
            return _score_store

    _score_store = InMemoryScoreStore()
    return _score_store
