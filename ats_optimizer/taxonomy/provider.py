from __future__ import annotations

from typing import Protocol


class TaxonomyProvider(Protocol):
    def canonicalize(self, raw: str) -> str:
        """Return the lowercase, version-stripped, alias-resolved form of a skill."""

    def classify(self, raw: str) -> str | None:
        """Return the canonical category for a skill, or None when no rule matches."""

    def format_display_name(self, raw: str) -> str:
        """Return the display form of a skill."""

    def category_order(self) -> tuple[str, ...]:
        """Return category names in résumé display order."""

    def skills_for_category(self, category: str) -> tuple[str, ...]:
        """Return the configured terms for a category."""
