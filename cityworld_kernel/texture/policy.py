"""
Domain policies — optional suppression capability for ambient sampling.

A policy answers one question: is this domain suppressed right now?
When the caller supplies none, everything is allowed.
"""

from typing import FrozenSet, Iterable, Protocol

from cityworld_kernel.adapters import normalize_domain
from cityworld_kernel.models.domain import Domain


class DomainPolicy(Protocol):
    """Protocol for domain suppression — pluggable per caller."""

    def is_suppressed(self, domain: Domain) -> bool: ...


class AllowAllPolicy:
    """Default policy: nothing is suppressed."""

    def is_suppressed(self, domain: Domain) -> bool:
        return False


class SuppressedDomainsPolicy:
    """Suppresses a fixed set of domains, e.g. NIGHTLIFE and CRIME on a calm holiday."""

    def __init__(self, domains: Iterable):
        resolved = (normalize_domain(d) for d in domains)
        self.domains: FrozenSet[Domain] = frozenset(d for d in resolved if d is not None)

    def is_suppressed(self, domain: Domain) -> bool:
        return domain in self.domains
