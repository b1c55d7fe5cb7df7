from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from .vocabulary import synonyms_for

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class VerbOverflow:
    verb: str
    count: int


@dataclass(slots=True)
class VerbUsageLedger:
    """Leading-verb usage counts for one repair pass over one résumé.

    The ceiling is a soft target: once every synonym of a verb is also at the
    ceiling, the verb is reused and the event is recorded in ``overflow``.
    """

    ceiling: int = 2
    counts: dict[str, int] = field(default_factory=dict)
    overflow: list[VerbOverflow] = field(default_factory=list)

    def count(self, verb: str) -> int:
        return self.counts.get(verb.lower(), 0)

    def has_capacity(self, verb: str) -> bool:
        return self.count(verb) < self.ceiling

    def resolve(self, verb: str) -> str:
        """Return the verb to use for the next bullet and record its use."""
        lowered = verb.lower()
        if self.has_capacity(lowered):
            self.counts[lowered] = self.count(lowered) + 1
            return verb

        for synonym in synonyms_for(lowered):
            if self.has_capacity(synonym):
                self.counts[synonym] = self.count(synonym) + 1
                return synonym[:1].upper() + synonym[1:]

        self.counts[lowered] = self.count(lowered) + 1
        self.overflow.append(VerbOverflow(verb=lowered, count=self.counts[lowered]))
        logger.debug("verb_ceiling_overflow verb=%s count=%s", lowered, self.counts[lowered])
        return verb

    def first_available(self, candidates: Iterable[str], start: int = 0) -> str:
        """Pick a candidate under the ceiling, rotating from ``start``; fall back to the rotated first."""
        pool = list(candidates)
        if not pool:
            raise ValueError("candidates must not be empty")
        rotated = pool[start % len(pool):] + pool[: start % len(pool)]
        for candidate in rotated:
            if self.has_capacity(candidate):
                return candidate
        return rotated[0]

    def overflow_verbs(self) -> set[str]:
        return {event.verb for event in self.overflow}
