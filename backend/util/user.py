"""Account record shared by the store and the HTTP layer."""

from __future__ import annotations
from dataclasses import dataclass, asdict


@dataclass
class User:
    """A registered account.

    Passwords are kept and compared as plaintext; nothing here hashes them.
    """
    email: str
    password: str = ""
    score: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
