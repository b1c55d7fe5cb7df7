from functools import lru_cache

from .aggregate import SkillAggregation, aggregate_categories, aggregate_skills, validate_skill_category
from .local_taxonomy import LocalTaxonomy
from .provider import TaxonomyProvider


@lru_cache(maxsize=1)
def get_default_taxonomy_provider() -> TaxonomyProvider:
    return LocalTaxonomy()


__all__ = [
    "LocalTaxonomy",
    "SkillAggregation",
    "TaxonomyProvider",
    "aggregate_categories",
    "aggregate_skills",
    "get_default_taxonomy_provider",
    "validate_skill_category",
]
