from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal, TypeVar

from ats_optimizer.core.config.scoring import get_scoring_int
from ats_optimizer.features.keyword_extractor import extract_skills_in_order, extract_surface_forms, is_valid_tech_skill
from ats_optimizer.normalize.utils import (
    contains_whole_word,
    has_metric,
    leading_word,
    normalize_line,
    strip_bullet_prefix,
    word_count,
)
from ats_optimizer.schemas.optimizer import ChangeLogEntry
from ats_optimizer.schemas.resume import ProjectEntry, ResumeDocument, WorkExperienceEntry
from ats_optimizer.taxonomy import get_default_taxonomy_provider

from .ledger import VerbUsageLedger
from .vocabulary import (
    FALLBACK_BULLETS,
    POWER_VERBS,
    QUANTIFICATION_TEMPLATES,
    STRONG_VERBS,
    WEAK_VERB_MAP,
    bullet_category,
    fallback_bank,
    quantification_category,
)

logger = logging.getLogger(__name__)

EntryKind = Literal["experience", "projects"]
Entry = TypeVar("Entry", WorkExperienceEntry, ProjectEntry)

_CONNECTORS = ("using", "leveraging")
_CONNECTOR_RE = re.compile(r"\b(using|leveraging|utilizing)\b", re.IGNORECASE)
_TRAILING_PUNCT_RE = re.compile(r"[\s.,;:!?]+$")
_WORD_CHAR_RE = re.compile(r"\w")


@dataclass(slots=True)
class BulletProfile:
    leading_verb: str
    has_action_verb: bool
    has_metric: bool
    has_keyword: bool
    word_count: int


@dataclass(slots=True)
class RepairResult:
    resume: ResumeDocument
    changes: list[ChangeLogEntry] = field(default_factory=list)
    ledger: VerbUsageLedger = field(default_factory=VerbUsageLedger)


@dataclass(slots=True)
class _InjectionState:
    """Document-wide rotation cursors shared by every bullet in one repair pass."""

    bullet_index: int = 0
    keyword_index: int = 0
    connector_index: int = 0
    used_fallbacks: set[str] = field(default_factory=set)


def describe_bullet(text: str, jd_keywords: Sequence[str] = ()) -> BulletProfile:
    verb = leading_word(text)
    return BulletProfile(
        leading_verb=verb,
        has_action_verb=verb in STRONG_VERBS,
        has_metric=has_metric(text),
        has_keyword=any(contains_whole_word(text, keyword) for keyword in jd_keywords),
        word_count=word_count(text),
    )


def _lower_displaced(word: str) -> str:
    """Lowercase a sentence-initial word; acronyms and mixed-case names keep their case."""
    if is_valid_tech_skill(re.sub(r"[^\w.+#-]", "", word)):
        return word
    if len(word) > 1 and word[0].isupper() and word[1:] == word[1:].lower():
        return word[0].lower() + word[1:]
    return word


def _split_leading_verb(text: str) -> tuple[str, str]:
    """Return (verb phrase, remainder) after weak-verb substitution, or ("", text)."""
    words = text.split(" ")
    first = re.sub(r"[^\w-]", "", words[0]).lower()
    if len(words) > 1:
        second = re.sub(r"[^\w-]", "", words[1]).lower()
        two = f"{first} {second}"
        if two in WEAK_VERB_MAP:
            return WEAK_VERB_MAP[two], " ".join(words[2:])
    if first in WEAK_VERB_MAP:
        return WEAK_VERB_MAP[first], " ".join(words[1:])
    if first in STRONG_VERBS:
        return words[0].rstrip(",;:"), " ".join(words[1:])
    return "", text


def _with_tail(text: str, tail: str) -> str:
    return f"{_TRAILING_PUNCT_RE.sub('', text)}{tail}"


def _has_content(bullet: str) -> bool:
    return bool(_WORD_CHAR_RE.search(normalize_line(strip_bullet_prefix(bullet))))


class _BulletRepairer:
    def __init__(
        self,
        *,
        presence_terms: Sequence[str],
        injection_pool: Sequence[str],
        ledger: VerbUsageLedger,
        state: _InjectionState,
        changes: list[ChangeLogEntry],
    ) -> None:
        self.presence_terms = tuple(presence_terms)
        self.injection_pool = tuple(injection_pool)
        self.ledger = ledger
        self.state = state
        self.changes = changes

    def repair(self, bullet: str) -> str:
        index = self.state.bullet_index
        self.state.bullet_index += 1

        text = normalize_line(strip_bullet_prefix(bullet))
        if not text:
            return text
        original = text

        verb_phrase, rest = _split_leading_verb(text)
        if not verb_phrase:
            candidates = POWER_VERBS[bullet_category(original)]
            verb_phrase = self.ledger.first_available(candidates, index)
            first, _, remainder = text.partition(" ")
            rest = f"{_lower_displaced(first)} {remainder}".strip()

        verb, _, phrase_tail = verb_phrase.partition(" ")
        verb = self.ledger.resolve(verb[:1].upper() + verb[1:])
        head = f"{verb} {phrase_tail}".strip()
        text = f"{head} {rest}".strip()

        if not has_metric(text):
            templates = QUANTIFICATION_TEMPLATES[quantification_category(original)]
            text = _with_tail(text, f", {templates[index % len(templates)]}")

        text = self._inject_keyword(text)

        text = text[:1].upper() + text[1:]
        if not text.endswith((".", "!", "?")):
            text = f"{text}."
        return text

    def _inject_keyword(self, text: str) -> str:
        if not self.injection_pool or _CONNECTOR_RE.search(text):
            return text
        if any(contains_whole_word(text, term) for term in self.presence_terms):
            return text
        keyword = self.injection_pool[self.state.keyword_index % len(self.injection_pool)]
        connector = _CONNECTORS[self.state.connector_index % len(_CONNECTORS)]
        self.state.keyword_index += 1
        self.state.connector_index += 1
        return _with_tail(text, f" {connector} {keyword}")

    def fallback_bullets(self, existing: Sequence[str], needed: int, *role_hints: str) -> list[str]:
        """Pick technology-free padding bullets, deduplicated document-wide by prefix."""
        dedupe_chars = get_scoring_int("repair.fallback_dedupe_chars", 30)
        taken = {normalize_line(item).lower()[:dedupe_chars] for item in existing}
        preferred = fallback_bank(*role_hints)
        banks = [preferred, *(bank for bank in FALLBACK_BULLETS.values() if bank is not preferred)]

        picked: list[str] = []
        for bank in banks:
            for candidate in bank:
                if len(picked) >= needed:
                    return picked
                key = candidate.lower()[:dedupe_chars]
                if key in taken or key in self.state.used_fallbacks:
                    continue
                taken.add(key)
                self.state.used_fallbacks.add(key)
                picked.append(candidate)

        # Every bank is exhausted; reuse while staying unique inside the entry.
        for candidate in (item for bank in banks for item in bank):
            if len(picked) >= needed:
                break
            key = candidate.lower()[:dedupe_chars]
            if key not in taken:
                taken.add(key)
                picked.append(candidate)
        return picked


def _bullet_bounds(kind: EntryKind) -> tuple[int, int]:
    if kind == "experience":
        return (
            get_scoring_int("repair.work_bullets.min", 3),
            get_scoring_int("repair.work_bullets.max", 3),
        )
    return (
        get_scoring_int("repair.project_bullets.min", 2),
        get_scoring_int("repair.project_bullets.max", 3),
    )


def _entry_label(entry: WorkExperienceEntry | ProjectEntry) -> str:
    if isinstance(entry, WorkExperienceEntry):
        return entry.company or entry.role or "experience entry"
    return entry.title or "project"


def _repair_entry_list(
    entries: Sequence[Entry],
    repairer: _BulletRepairer,
    *,
    kind: EntryKind,
    role_hint: str = "",
) -> list[Entry]:
    minimum, maximum = _bullet_bounds(kind)
    repaired_entries: list[Entry] = []

    for entry in entries:
        repaired = entry.model_copy(deep=True)
        label = _entry_label(entry)
        bullets = [bullet for bullet in entry.bullets if _has_content(bullet)]

        for dropped in bullets[maximum:]:
            repairer.changes.append(
                ChangeLogEntry(
                    section=kind,
                    change_type="removed",
                    before=dropped,
                    description=f"Trimmed extra bullet in {label}",
                )
            )
        bullets = bullets[:maximum]

        result: list[str] = []
        for bullet in bullets:
            fixed = repairer.repair(bullet)
            if fixed != bullet:
                repairer.changes.append(
                    ChangeLogEntry(
                        section=kind,
                        change_type="rewritten",
                        before=bullet,
                        after=fixed,
                        description=f"Rewritten bullet in {label}",
                    )
                )
            result.append(fixed)

        if len(result) < minimum:
            hints = (
                (entry.role, role_hint) if isinstance(entry, WorkExperienceEntry) else (entry.title, role_hint)
            )
            for fallback in repairer.fallback_bullets(bullets, minimum - len(result), *hints):
                fixed = repairer.repair(fallback)
                repairer.changes.append(
                    ChangeLogEntry(
                        section=kind,
                        change_type="added",
                        after=fixed,
                        description=f"Added bullet to {label}",
                    )
                )
                result.append(fixed)

        repaired.bullets = result
        repaired_entries.append(repaired)
    return repaired_entries


def _keyword_terms(jd_text: str, jd_keywords: Sequence[str] | None) -> list[str]:
    if jd_keywords is not None:
        return [keyword for keyword in jd_keywords if keyword]
    provider = get_default_taxonomy_provider()
    terms: list[str] = []
    for token in extract_skills_in_order(jd_text):
        display = provider.format_display_name(token)
        if display not in terms:
            terms.append(display)
    return terms


def _build_repairer(
    jd_text: str,
    *,
    jd_keywords: Sequence[str] | None,
    missing_keywords: Sequence[str] | None,
    ledger: VerbUsageLedger,
    changes: list[ChangeLogEntry],
    state: _InjectionState | None = None,
) -> _BulletRepairer:
    keywords = _keyword_terms(jd_text, jd_keywords)
    surface = extract_surface_forms(jd_text)
    presence = list(dict.fromkeys([*keywords, *surface, *(missing_keywords or ())]))
    # Only wording the caller or the job description supplied is ever injected.
    pool = [keyword for keyword in (missing_keywords or ()) if keyword] or surface or list(jd_keywords or ())
    return _BulletRepairer(
        presence_terms=presence,
        injection_pool=pool,
        ledger=ledger,
        state=state or _InjectionState(),
        changes=changes,
    )


def _new_ledger() -> VerbUsageLedger:
    return VerbUsageLedger(ceiling=get_scoring_int("repair.verb_ceiling", 2))


def repair_entries(
    entries: Sequence[Entry],
    jd_text: str,
    *,
    kind: EntryKind,
    jd_keywords: Sequence[str] | None = None,
    missing_keywords: Sequence[str] | None = None,
    ledger: VerbUsageLedger | None = None,
    role_hint: str = "",
) -> tuple[list[Entry], list[ChangeLogEntry]]:
    """Repair one list of work or project entries, sharing the caller's ledger."""
    changes: list[ChangeLogEntry] = []
    repairer = _build_repairer(
        jd_text,
        jd_keywords=jd_keywords,
        missing_keywords=missing_keywords,
        ledger=ledger if ledger is not None else _new_ledger(),
        changes=changes,
    )
    return _repair_entry_list(entries, repairer, kind=kind, role_hint=role_hint), changes


def repair_resume(
    resume: ResumeDocument,
    jd_text: str,
    *,
    jd_keywords: Sequence[str] | None = None,
    missing_keywords: Sequence[str] | None = None,
    ledger: VerbUsageLedger | None = None,
) -> RepairResult:
    """Repair every experience and project bullet of a copy of ``resume``.

    Per bullet: weak-verb substitution, strong-verb enforcement, anti-repetition
    through the ledger, quantification, a single keyword injection and formatting.
    Entries are then pinned to their bullet-count window, padding from the
    role's fallback bank when short.
    """
    ledger = ledger if ledger is not None else _new_ledger()
    changes: list[ChangeLogEntry] = []
    repairer = _build_repairer(
        jd_text,
        jd_keywords=jd_keywords,
        missing_keywords=missing_keywords,
        ledger=ledger,
        changes=changes,
    )

    repaired = resume.model_copy(deep=True)
    repaired.work_experience = _repair_entry_list(
        resume.work_experience, repairer, kind="experience", role_hint=resume.target_role
    )
    repaired.projects = _repair_entry_list(
        resume.projects, repairer, kind="projects", role_hint=resume.target_role
    )

    if ledger.overflow:
        logger.info("repair_verb_overflow verbs=%s", ",".join(sorted(ledger.overflow_verbs())))
    return RepairResult(resume=repaired, changes=changes, ledger=ledger)
