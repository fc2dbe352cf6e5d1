"""
Cooldown Store — throttles crisis recurrence.

Two maps, both keyed "CATEGORY|value":
  location: (category, neighborhood) → cycle the cooldown expires
  subtype:  (category, subtype)      → cycle it was last accepted

Read before a crisis is accepted, written right after. The caller owns
the store between cycles; `get_snapshot` / `from_snapshot` round-trip it.
"""

import logging
from typing import Dict, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class CooldownState(BaseModel):
    location_until: Dict[str, int] = {}
    subtype_last_seen: Dict[str, int] = {}


def _key(category: str, value: Optional[str]) -> str:
    return f"{category}|{value or ''}"


class CooldownStore:
    """
    In-memory cooldown maps for one simulated city.
    Entries are never removed automatically; see `prune`.
    """

    def __init__(self, state: Optional[CooldownState] = None):
        self._state = state or CooldownState()

    @classmethod
    def from_snapshot(cls, snapshot: dict) -> "CooldownStore":
        return cls(CooldownState.model_validate(snapshot))

    @property
    def state(self) -> CooldownState:
        return self._state

    def location_until(self, category: str, location: str) -> Optional[int]:
        return self._state.location_until.get(_key(category, location))

    def subtype_last_seen(self, category: str, subtype: str) -> Optional[int]:
        return self._state.subtype_last_seen.get(_key(category, subtype))

    def is_location_cooling(self, category: str, location: str, cycle: int) -> bool:
        """True while `cycle` is before the stored expiry cycle."""
        until = self.location_until(category, location)
        return until is not None and cycle < until

    def was_subtype_seen_recently(
        self, category: str, subtype: str, cycle: int, window: int = 2
    ) -> bool:
        """True if the subtype was accepted fewer than `window` cycles ago."""
        last = self.subtype_last_seen(category, subtype)
        return last is not None and (cycle - last) < window

    def in_cooldown(
        self, category: str, location: str, subtype: str, cycle: int, window: int = 2
    ) -> bool:
        return self.is_location_cooling(category, location, cycle) or \
            self.was_subtype_seen_recently(category, subtype, cycle, window)

    def set_cooldown(
        self, category: str, location: str, subtype: str, cycle: int, length: int
    ) -> None:
        """Record an accepted crisis."""
        self._state.location_until[_key(category, location)] = cycle + length
        self._state.subtype_last_seen[_key(category, subtype)] = cycle

    def prune(self, cycle: int, window: int = 2) -> int:
        """
        Drop entries that can no longer block anything at `cycle`.
        Returns the number of keys removed. Never called by the kernel itself.
        """
        expired = [
            k for k, until in self._state.location_until.items() if until <= cycle
        ]
        stale = [
            k for k, last in self._state.subtype_last_seen.items()
            if cycle - last >= window
        ]
        for k in expired:
            del self._state.location_until[k]
        for k in stale:
            del self._state.subtype_last_seen[k]
        removed = len(expired) + len(stale)
        if removed:
            logger.debug("Pruned %d cooldown entries at cycle %d", removed, cycle)
        return removed

    def __len__(self) -> int:
        return len(self._state.location_until) + len(self._state.subtype_last_seen)

    def get_snapshot(self) -> dict:
        """Get a serializable snapshot of both maps."""
        return self._state.model_dump(mode="json")
