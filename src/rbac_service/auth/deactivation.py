"""In-process record of recently deactivated accounts.

Token claims are fixed at issuance, so a token issued before an account was
deactivated still says ``isActive: true``. The user service records each
deactivation here for one token lifetime; the token validator consults it
without any I/O. Entries outlive every token that could predate them, then
expire on their own.

The registry is per-process; other processes only see the ``isActive`` claim.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Callable


class DeactivationRegistry:
    """Maps user id to the wall-clock time until which its tokens are refused."""

    def __init__(
        self,
        retention_seconds: int,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.retention_seconds = retention_seconds
        self._clock = clock or time.time
        self._until: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._until)

    def mark(self, user_id: str) -> None:
        """Refuse tokens for ``user_id`` for the next token lifetime."""
        self._until[user_id] = self._clock() + self.retention_seconds
        self._purge()

    def clear(self, user_id: str) -> None:
        """Forget a user, e.g. after re-activation."""
        self._until.pop(user_id, None)

    def is_deactivated(self, user_id: str) -> bool:
        until = self._until.get(user_id)
        if until is None:
            return False
        if self._clock() >= until:
            del self._until[user_id]
            return False
        return True

    def _purge(self) -> None:
        now = self._clock()
        for user_id in [uid for uid, until in self._until.items() if now >= until]:
            del self._until[user_id]
