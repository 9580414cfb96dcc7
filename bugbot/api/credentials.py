"""
Rotating pool of GitHub access tokens.

The pool is owned by whoever runs sync cycles and passed explicitly to the
fetcher. Only the fetcher rotates it, and only while a cycle is active, so the
rotation index needs no lock.
"""

from dataclasses import dataclass
from typing import List, Sequence

from bugbot.enums import CredentialState


class ConfigError(Exception):
    """Raised when the sync engine cannot run with the supplied configuration."""
    pass


@dataclass
class Credential:
    """A single access token and its per-cycle state."""

    token: str
    index: int
    state: CredentialState = CredentialState.AVAILABLE

    def __repr__(self) -> str:
        # Never print the token itself
        return f"Credential(index={self.index}, state={self.state.value})"


class CredentialPool:
    """
    Round-robin pool of GitHub tokens.

    Usage:
        pool = CredentialPool(["ghp_a", "ghp_b"])
        credential = pool.acquire()
        ...
        pool.rotate()  # after a rate-limit response
    """

    def __init__(self, tokens: Sequence[str]):
        cleaned = [token.strip() for token in tokens if token and token.strip()]
        if not cleaned:
            raise ConfigError("At least one GitHub token is required (set GITHUB_TOKENS)")

        self._credentials: List[Credential] = [
            Credential(token=token, index=i) for i, token in enumerate(cleaned)
        ]
        self._index = 0

    @classmethod
    def from_settings(cls, settings) -> "CredentialPool":
        """Build the pool from application settings."""
        return cls(settings.github_token_list)

    @property
    def index(self) -> int:
        """Current rotation index. Persists across cycles."""
        return self._index

    def acquire(self) -> Credential:
        """Return the credential at the current rotation index."""
        return self._credentials[self._index]

    def rotate(self) -> Credential:
        """
        Mark the current credential as cooling and advance to the next one.

        Returns:
            The newly current credential
        """
        self._credentials[self._index].state = CredentialState.COOLING
        self._index = (self._index + 1) % len(self._credentials)
        return self._credentials[self._index]

    def reset_cycle(self) -> None:
        """Make every credential available again. Rotation index is kept."""
        for credential in self._credentials:
            credential.state = CredentialState.AVAILABLE

    def available_count(self) -> int:
        """Number of credentials not rate-limited during the current cycle."""
        return sum(1 for c in self._credentials if c.state == CredentialState.AVAILABLE)

    def size(self) -> int:
        """Number of configured credentials."""
        return len(self._credentials)

    def __len__(self) -> int:
        return len(self._credentials)
