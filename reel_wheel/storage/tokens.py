"""Persistent storage for the access/refresh token pair.

Tokens live as two string values under the fixed keys ``access_token``
and ``refresh_token``.  :class:`FileTokenStore` keeps them in a JSON file
in the platform config directory (see :data:`paths.TOKENS_FILE`) and
writes through :func:`atomic_write`; :class:`MemoryTokenStore` keeps them
in a dict for short-lived sessions and tests.

The pair's ``token_type`` is not stored.  The API only issues bearer
tokens and requests always send ``Authorization: Bearer``, so a
hydrated pair comes back with the default ``"bearer"``.
"""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger

from ..models.user import TokenPair
from .paths import TOKENS_FILE, atomic_write

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"


def _pair_from_values(values: dict) -> TokenPair | None:
    access = values.get(ACCESS_TOKEN_KEY)
    refresh = values.get(REFRESH_TOKEN_KEY)
    if not access or not refresh:
        return None
    return TokenPair(access_token=access, refresh_token=refresh)


class MemoryTokenStore:
    """In-process token storage with the same interface as the file store."""

    def __init__(self, tokens: TokenPair | None = None) -> None:
        self._values: dict[str, str] = {}
        if tokens is not None:
            self.save(tokens)

    def load(self) -> TokenPair | None:
        return _pair_from_values(self._values)

    def save(self, tokens: TokenPair) -> None:
        self._values = {
            ACCESS_TOKEN_KEY: tokens.access_token,
            REFRESH_TOKEN_KEY: tokens.refresh_token,
        }

    def clear(self) -> None:
        self._values = {}


class FileTokenStore:
    """JSON-file token storage.

    A file holding only one of the two keys loads as ``None`` so that a
    partially written pair never hydrates an authenticated session.
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or TOKENS_FILE

    def load(self) -> TokenPair | None:
        """Load saved tokens, returning ``None`` if absent or unreadable."""
        if not self.path.exists():
            return None
        try:
            values = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, ValueError) as exc:
            logger.warning(f"Failed to load tokens from {self.path}: {exc}")
            return None
        if not isinstance(values, dict):
            return None
        return _pair_from_values(values)

    def save(self, tokens: TokenPair) -> None:
        atomic_write(
            self.path,
            json.dumps(
                {
                    ACCESS_TOKEN_KEY: tokens.access_token,
                    REFRESH_TOKEN_KEY: tokens.refresh_token,
                },
                indent=2,
            ),
        )
        logger.debug(f"Tokens saved to {self.path}")

    def clear(self) -> None:
        """Remove the persisted tokens file, if it exists."""
        try:
            if self.path.exists():
                self.path.unlink()
                logger.debug(f"Tokens deleted from {self.path}")
        except OSError as exc:
            logger.error(f"Failed to delete tokens at {self.path}: {exc}")
