from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .data import RuleSpec, TaxonomyConfig

Predicate = Callable[[str], bool]

_LANGUAGE_SPLIT_RE = re.compile(r"[\s,/]+")


@dataclass(frozen=True, slots=True)
class ClassificationRule:
    category: str
    predicate: Predicate


def contains_predicate(terms: Iterable[str]) -> Predicate:
    """Match any term appearing inside the token at token boundaries."""
    ordered = sorted({term for term in terms if term}, key=len, reverse=True)
    if not ordered:
        return lambda _token: False
    pattern = re.compile(
        r"(?<![a-z0-9])(?:" + "|".join(re.escape(term) for term in ordered) + r")(?![a-z0-9])"
    )
    return lambda token: bool(pattern.search(token))


def language_predicate(terms: Iterable[str]) -> Predicate:
    """Exact or word-boundary match so 'java' never claims 'javascript'."""
    languages = frozenset(terms)

    def predicate(token: str) -> bool:
        if token in languages:
            return True
        if token.endswith(".js") and token[: -len(".js")] in languages:
            return True
        return any(part in languages for part in _LANGUAGE_SPLIT_RE.split(token) if part)

    return predicate


_PREDICATE_BUILDERS: dict[str, Callable[[Iterable[str]], Predicate]] = {
    "contains": contains_predicate,
    "language": language_predicate,
}


def build_rule(spec: RuleSpec) -> ClassificationRule:
    builder = _PREDICATE_BUILDERS.get(spec.match)
    if builder is None:
        raise RuntimeError(f"Unknown taxonomy match type '{spec.match}' for '{spec.category}'.")
    return ClassificationRule(category=spec.category, predicate=builder(spec.terms))


def build_rules(config: TaxonomyConfig) -> tuple[ClassificationRule, ...]:
    return tuple(build_rule(spec) for spec in config.rules)


class SkillClassifier:
    """First-match-wins evaluation of an ordered rule list."""

    def __init__(self, rules: Iterable[ClassificationRule]) -> None:
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[ClassificationRule, ...]:
        return self._rules

    def classify(self, canonical_token: str) -> str | None:
        if not canonical_token:
            return None
        for rule in self._rules:
            if rule.predicate(canonical_token):
                return rule.category
        return None
