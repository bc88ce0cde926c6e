"""Per-player session registry with serialized, persisted actions."""

import asyncio
import logging
from collections import Counter, OrderedDict
from contextlib import asynccontextmanager
from random import Random
from typing import AsyncIterator, Callable

from api.scores import ScoreStore, get_score_store
from config import config
from core.auth import Authenticator, normalize_address
from core.cards import Card, full_deck
from core.errors import DeckExhaustedError, InvalidActionError, PersistenceError
from core.game import BlackjackSession, Outcome, SessionSnapshot, SessionView

logger = logging.getLogger(__name__)


class SessionController:
    """
    Owns every player's session and the rules for touching them.

    Sessions are keyed by lower-cased address. Each address has its own
    lock so actions for one player run one at a time while different
    players never wait on each other.

    At most ``max_sessions`` sessions are kept. Registering one more
    evicts the least recently used session nobody is acting on, along
    with its lock.

    When a score write fails, the session is rolled back to its state
    before the action, keeping memory and the store consistent.
    """

    def __init__(
        self,
        store: ScoreStore,
        rng: Random | None = None,
        deck_factory: Callable[[], list[Card]] = full_deck,
        max_sessions: int | None = None,
    ) -> None:
        self._store = store
        self._rng = rng
        self._deck_factory = deck_factory
        self._max_sessions = max_sessions or config.max_sessions
        self._sessions: OrderedDict[str, BlackjackSession] = OrderedDict()
        self._locks: dict[str, asyncio.Lock] = {}
        # Tasks holding or waiting on each address's lock
        self._users: Counter[str] = Counter()

    @asynccontextmanager
    async def _locked(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                if key not in self._sessions:
                    del self._locks[key]

    def _register(self, key: str, session: BlackjackSession) -> None:
        self._sessions[key] = session
        self._sessions.move_to_end(key)
        while len(self._sessions) > self._max_sessions:
            idle = next((k for k in self._sessions if not self._users[k]), None)
            if idle is None:
                break
            del self._sessions[idle]
            self._locks.pop(idle, None)
            logger.info("Evicted idle session for %s", idle)

    def _new_session(self) -> BlackjackSession:
        return BlackjackSession(
            rng=self._rng,
            deck_factory=self._deck_factory,
            win_points=config.game.win_points,
            dealer_stands_on=config.game.dealer_stands_on,
        )

    def get(self, address: str) -> BlackjackSession | None:
        """Return the live session for an address, if one exists."""
        return self._sessions.get(normalize_address(address))

    async def start(self, address: str) -> SessionView:
        """
        Start or reset the player's hand.

        Raises:
            ValidationError: If the address is malformed
            PersistenceError: If the score cannot be read, or a hand that
                settled on the deal cannot be saved
        """
        key = normalize_address(address)
        async with self._locked(key):
            session = self._sessions.get(key) or self._new_session()
            stored = await self._store.get_score(key)

            snapshot = session.snapshot()
            outcome = self._run(key, session.start, stored or 0)
            self._register(key, session)

            if outcome is not None:
                await self._commit(key, session, snapshot, outcome)
            return session.view()

    async def hit(self, address: str) -> SessionView:
        """Draw a card for the player; persists the score if the hand settles."""
        return await self._act(address, "hit")

    async def stand(self, address: str) -> SessionView:
        """Play out the dealer and settle the hand."""
        return await self._act(address, "stand")

    async def _act(self, address: str, action: str) -> SessionView:
        key = normalize_address(address)
        if key not in self._sessions:
            raise InvalidActionError(action, "no hand started")

        async with self._locked(key):
            session = self._sessions.get(key)
            if session is None:
                raise InvalidActionError(action, "no hand started")
            self._sessions.move_to_end(key)

            snapshot = session.snapshot()
            outcome = self._run(key, getattr(session, action))
            if outcome is not None:
                await self._commit(key, session, snapshot, outcome)
            return session.view()

    def _run(
        self,
        key: str,
        step: Callable[..., Outcome | None],
        *args: int,
    ) -> Outcome | None:
        try:
            return step(*args)
        except DeckExhaustedError:
            self._sessions.pop(key, None)
            logger.error("Deck exhausted for %s; session discarded", key)
            raise

    async def _commit(
        self,
        key: str,
        session: BlackjackSession,
        snapshot: SessionSnapshot,
        outcome: Outcome,
    ) -> None:
        try:
            await self._store.put_score(key, session.score)
        except PersistenceError:
            session.restore(snapshot)
            logger.warning(
                "Rolled back %s for %s after failed score write", outcome.name, key
            )
            raise
        logger.info("%s for %s, score now %d", outcome.name, key, session.score)


# Global controller instance
_controller: SessionController | None = None


async def get_session_controller() -> SessionController:
    """Get or create the session controller."""
    global _controller
    if _controller is None:
        _controller = SessionController(await get_score_store())
    return _controller


_authenticator: Authenticator | None = None


def get_authenticator() -> Authenticator:
    """Get or create the token authenticator."""
    global _authenticator
    if _authenticator is None:
        _authenticator = Authenticator(
            secret_key=config.security.secret_key,
            ttl=config.security.token_ttl,
            salt=config.security.token_salt,
        )
    return _authenticator
