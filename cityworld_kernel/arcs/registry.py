"""
Arc Registry — read/append view over the caller-owned arc list.

The list is mutated in place so spawns are visible to the caller and to
every later component in the same cycle. Resolved arcs are excluded from
every active-arc lookup.
"""

from typing import List, Optional

from cityworld_kernel.models.arc import Arc
from cityworld_kernel.models.domain import Domain


class ArcRegistry:

    def __init__(self, arcs: Optional[List[Arc]] = None):
        self._arcs = arcs if arcs is not None else []

    @property
    def arcs(self) -> List[Arc]:
        """The underlying caller-owned list."""
        return self._arcs

    def active(self) -> List[Arc]:
        return [a for a in self._arcs if a.is_active]

    def has_active_arc(self, domain: Domain, neighborhood: Optional[str]) -> bool:
        """
        True if a non-resolved arc exists for the domain at the neighborhood.
        A missing neighborhood matches any arc of that domain.
        """
        for arc in self._arcs:
            if not arc.is_active or arc.domain != domain:
                continue
            if not neighborhood or arc.neighborhood == neighborhood:
                return True
        return False

    def get(self, arc_id: str) -> Optional[Arc]:
        return next((a for a in self._arcs if a.arc_id == arc_id), None)

    def created_in(self, cycle: int) -> List[Arc]:
        return [a for a in self._arcs if a.cycle_created == cycle]

    def add(self, arc: Arc) -> None:
        self._arcs.append(arc)

    def __len__(self) -> int:
        return len(self._arcs)

    def __iter__(self):
        return iter(self._arcs)
