from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

DEFAULT_TAXONOMY_PATH = Path(__file__).with_name("skills_taxonomy.json")


@dataclass(frozen=True, slots=True)
class RuleSpec:
    category: str
    match: str
    terms: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class TaxonomyConfig:
    version: int
    display_order: tuple[str, ...]
    rules: tuple[RuleSpec, ...]
    normalizations: Mapping[str, str]
    display_names: Mapping[str, str]

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(rule.category for rule in self.rules)


def _lower_map(raw: Any, *, field: str, path: Path) -> Mapping[str, str]:
    if not isinstance(raw, dict):
        raise RuntimeError(f"Invalid taxonomy '{path}': '{field}' must be a mapping.")
    return MappingProxyType({str(key).strip().lower(): str(value) for key, value in raw.items()})


def parse_taxonomy(raw: Any, *, path: Path = DEFAULT_TAXONOMY_PATH) -> TaxonomyConfig:
    if not isinstance(raw, dict):
        raise RuntimeError(f"Invalid taxonomy '{path}': expected a top-level mapping.")

    rules: list[RuleSpec] = []
    for index, item in enumerate(raw.get("rules") or []):
        if not isinstance(item, dict) or not item.get("category"):
            raise RuntimeError(f"Invalid taxonomy '{path}': rule #{index} has no category.")
        terms = tuple(str(term).strip().lower() for term in item.get("terms") or [] if str(term).strip())
        rules.append(
            RuleSpec(
                category=str(item["category"]),
                match=str(item.get("match") or "contains"),
                terms=terms,
            )
        )
    if not rules:
        raise RuntimeError(f"Invalid taxonomy '{path}': no classification rules defined.")

    categories = {rule.category for rule in rules}
    display_order = tuple(str(name) for name in raw.get("display_order") or [rule.category for rule in rules])
    unknown = [name for name in display_order if name not in categories]
    if unknown:
        raise RuntimeError(f"Invalid taxonomy '{path}': unknown display categories {unknown}.")

    return TaxonomyConfig(
        version=int(raw.get("version") or 1),
        display_order=display_order,
        rules=tuple(rules),
        normalizations=_lower_map(raw.get("normalizations") or {}, field="normalizations", path=path),
        display_names=_lower_map(raw.get("display_names") or {}, field="display_names", path=path),
    )


def load_taxonomy(path: str | Path | None = None) -> TaxonomyConfig:
    resolved = Path(path) if path else DEFAULT_TAXONOMY_PATH
    try:
        with resolved.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
    except OSError as exc:
        raise RuntimeError(f"Failed to read taxonomy '{resolved}': {exc}") from exc
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"Invalid JSON in taxonomy '{resolved}': {exc}") from exc
    return parse_taxonomy(raw, path=resolved)
