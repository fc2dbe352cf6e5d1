"""
Event Ledger — cross-cycle record of ambient event descriptions.

Queried by: Texture Generator (recent-description dedup)
Updated by: Cycle Engine after each cycle
"""

import logging
from typing import Dict, Iterable, List, Optional, Set

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class LedgerState(BaseModel):
    entries: Dict[int, List[str]] = {}


class EventLedger:
    """
    In-memory, append-only description ledger.
    The caller persists it between cycles via `get_snapshot`.
    """

    def __init__(self, state: Optional[LedgerState] = None):
        self._state = state or LedgerState()

    @classmethod
    def from_snapshot(cls, snapshot: dict) -> "EventLedger":
        return cls(LedgerState.model_validate(snapshot))

    def record(self, cycle: int, descriptions: Iterable[str]) -> None:
        """Append descriptions for a cycle."""
        self._state.entries.setdefault(cycle, []).extend(descriptions)

    def recent_descriptions(self, cycle: int, lookback: int = 5) -> Set[str]:
        """Descriptions recorded in cycles [cycle - lookback, cycle)."""
        recent: Set[str] = set()
        for c, descriptions in self._state.entries.items():
            if cycle - lookback <= c < cycle:
                recent.update(descriptions)
        return recent

    def cycles(self) -> List[int]:
        return sorted(self._state.entries)

    def prune(self, before_cycle: int) -> int:
        """Drop cycles older than `before_cycle`. Returns cycles removed."""
        old = [c for c in self._state.entries if c < before_cycle]
        for c in old:
            del self._state.entries[c]
        if old:
            logger.debug("Pruned %d ledger cycles before %d", len(old), before_cycle)
        return len(old)

    def get_snapshot(self) -> dict:
        return self._state.model_dump(mode="json")
