"""Redis-backed account and score store.

Layout
------
Two Redis hashes hold all state:

* ``users``  – field ``email`` -> plaintext password
* ``scores`` – field ``email`` -> integer score (absent means 0)

One ``UserStore`` is built per process and shared by every request thread;
``redis.Redis`` keeps its own thread-safe connection pool underneath.

Write modes
-----------
With ``atomic=True`` (default) signup uses ``HSETNX`` and score updates use
``HINCRBY``, so concurrent requests for the same email cannot overwrite an
account or lose an increment. With ``atomic=False`` the store issues the
separate read then write round trips instead (``HEXISTS`` + ``HSET``,
``HGET`` + ``HSET``). Those sequences race: two signups can both pass the
check, and two score updates can both read the same base value.

Error model:
    * Duplicate signup -> UserExistsError (a ValueError).
    * Unknown email where an account is required -> UserNotFoundError.
    * Any Redis failure (connection, timeout, bad stored value) -> StoreError,
      with the original exception chained as ``__cause__``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List

import redis

from util.user import User

log = logging.getLogger(__name__)

USERS_KEY = "users"
SCORES_KEY = "scores"


class StoreError(RuntimeError):
    """Redis round trip failed; ``message`` is safe to show to clients."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UserExistsError(ValueError):
    pass


class UserNotFoundError(LookupError):
    pass


@contextmanager
def _guard(message: str) -> Iterator[None]:
    try:
        yield
    except redis.RedisError as exc:
        raise StoreError(message) from exc
    except ValueError as exc:
        # Non-integer value sitting in the scores hash
        raise StoreError(message) from exc


class UserStore:
    """Account/score operations over a single Redis client."""

    def __init__(self, client: redis.Redis, atomic: bool = True) -> None:
        self.client = client
        self.atomic = atomic

    @classmethod
    def from_uri(cls, uri: str, atomic: bool = True) -> "UserStore":
        """Build a store from a ``redis://`` / ``rediss://`` URI.

        Raises ValueError when the URI cannot be parsed. No connection is
        opened until the first command.
        """
        client = redis.Redis.from_url(uri, decode_responses=True)
        return cls(client, atomic=atomic)

    def close(self) -> None:
        self.client.close()

    def ping(self) -> bool:
        with _guard("Error contacting store"):
            return bool(self.client.ping())

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def create_user(self, email: str, password: str) -> User:
        """Register ``email``; raises UserExistsError if already present."""
        if self.atomic:
            with _guard("Error storing user data"):
                created = self.client.hsetnx(USERS_KEY, email, password)
            if not created:
                raise UserExistsError(email)
        else:
            if self.user_exists(email):
                raise UserExistsError(email)
            with _guard("Error storing user data"):
                self.client.hset(USERS_KEY, email, password)
        log.debug("Created user %s", email)
        return User(email=email, password=password)

    def user_exists(self, email: str) -> bool:
        with _guard("Error checking user existence"):
            return bool(self.client.hexists(USERS_KEY, email))

    def get_password(self, email: str) -> str:
        with _guard("Error retrieving user data"):
            password = self.client.hget(USERS_KEY, email)
        if password is None:
            raise UserNotFoundError(email)
        return password

    def list_users(self) -> List[User]:
        """Every registered account with its current score."""
        with _guard("Error retrieving user data"):
            passwords = self.client.hgetall(USERS_KEY)
            scores = self.client.hgetall(SCORES_KEY)
            return [
                User(email=email, password=password, score=int(scores.get(email, 0)))
                for email, password in passwords.items()
            ]

    # ------------------------------------------------------------------
    # Scores
    # ------------------------------------------------------------------

    def get_score(self, email: str) -> int:
        """Current score for ``email``; 0 when never scored (or unknown)."""
        with _guard("Error retrieving user score"):
            raw = self.client.hget(SCORES_KEY, email)
            return int(raw) if raw is not None else 0

    def add_score(self, email: str, delta: int) -> int:
        """Add ``delta`` to a registered user's score and return the new value."""
        if not self.user_exists(email):
            raise UserNotFoundError(email)
        if self.atomic:
            with _guard("Error updating user score"):
                score = int(self.client.hincrby(SCORES_KEY, email, delta))
        else:
            score = self.get_score(email) + delta
            with _guard("Error updating user score"):
                self.client.hset(SCORES_KEY, email, score)
        log.debug("Score for %s is now %d", email, score)
        return score
