from __future__ import annotations

from pathlib import Path

from .classifier import SkillClassifier, build_rules
from .data import TaxonomyConfig, load_taxonomy
from .display import canonical_form, format_display_name
from .provider import TaxonomyProvider


class LocalTaxonomy(TaxonomyProvider):
    def __init__(
        self,
        taxonomy_path: str | Path | None = None,
        *,
        config: TaxonomyConfig | None = None,
    ) -> None:
        self._config = config if config is not None else load_taxonomy(taxonomy_path)
        self._classifier = SkillClassifier(build_rules(self._config))
        self._terms = {rule.category: rule.terms for rule in self._config.rules}

    @property
    def config(self) -> TaxonomyConfig:
        return self._config

    def canonicalize(self, raw: str) -> str:
        return canonical_form(raw, self._config.normalizations)

    def classify(self, raw: str) -> str | None:
        return self._classifier.classify(self.canonicalize(raw))

    def format_display_name(self, raw: str) -> str:
        return format_display_name(
            raw,
            normalizations=self._config.normalizations,
            display_names=self._config.display_names,
        )

    def category_order(self) -> tuple[str, ...]:
        return self._config.display_order

    def skills_for_category(self, category: str) -> tuple[str, ...]:
        return self._terms.get(category, ())
