from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ats_optimizer.schemas.resume import SkillCategory

from .provider import TaxonomyProvider

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SkillAggregation:
    categories: list[SkillCategory] = field(default_factory=list)
    dropped: list[str] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)

    def category_of(self, display_name: str) -> str | None:
        for category in self.categories:
            if display_name in category.items:
                return category.category
        return None


def validate_skill_category(provider: TaxonomyProvider, skill: str, category: str) -> bool:
    return provider.classify(skill) == category


def aggregate_skills(provider: TaxonomyProvider, tokens: Iterable[str]) -> SkillAggregation:
    """Reclassify tokens into canonical categories.

    Each normalized token lands in exactly one category; unclassifiable tokens are dropped.
    Categories come back in display order and keep first-seen token order inside a category.
    """
    buckets: dict[str, list[str]] = {}
    seen: set[str] = set()
    result = SkillAggregation()

    for raw in tokens:
        if not isinstance(raw, str) or not raw.strip():
            continue
        canonical = provider.canonicalize(raw)
        if not canonical:
            continue
        if canonical in seen:
            result.duplicates.append(raw)
            continue
        category = provider.classify(raw)
        if category is None:
            logger.debug("skill_unclassified token=%s", raw)
            result.dropped.append(raw)
            continue
        seen.add(canonical)
        buckets.setdefault(category, []).append(provider.format_display_name(raw))

    for category in provider.category_order():
        items = buckets.get(category)
        if items:
            result.categories.append(SkillCategory(category=category, items=items))
    return result


def aggregate_categories(
    provider: TaxonomyProvider,
    categories: Iterable[SkillCategory],
    *,
    extra: Iterable[str] = (),
) -> SkillAggregation:
    tokens = [item for category in categories for item in category.items]
    tokens.extend(extra)
    return aggregate_skills(provider, tokens)
