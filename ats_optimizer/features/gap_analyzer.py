from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from ats_optimizer.core.config.scoring import get_scoring_int
from ats_optimizer.normalize.utils import contains_whole_word, is_bullet_like
from ats_optimizer.schemas.gap import TIER_RANK, GapReport, KeywordRecord
from ats_optimizer.schemas.resume import ResumeDocument
from ats_optimizer.taxonomy import TaxonomyProvider, get_default_taxonomy_provider

from .keyword_extractor import (
    detect_seniority,
    extract_job_title,
    extract_skills_in_order,
    is_valid_tech_skill,
    scan_skill_mentions,
)

logger = logging.getLogger(__name__)

_REQUIRED_RE = re.compile(
    r"\b(required|requirements?|must[\s-]haves?|qualifications?|essential|mandatory)\b", re.IGNORECASE
)
_PREFERRED_RE = re.compile(
    r"\b(preferred|nice[\s-]to[\s-]haves?|bonus|pluses|optional|desirable)\b", re.IGNORECASE
)
_IMPORTANT_RE = re.compile(
    r"\b(strong|proficien\w*|expert\w*|experience (?:with|in)|hands[\s-]on)\b", re.IGNORECASE
)
_SECTION_RESET_RE = re.compile(
    r"^(responsibilities|about|benefits|perks|what you|who you|duties|overview|description|the role)",
    re.IGNORECASE,
)
_HEADING_MAX_CHARS = 60


@dataclass(slots=True)
class _KeywordHits:
    token: str
    position: int
    occurrences: int = 0
    contexts: set[str] = field(default_factory=set)
    in_lead: bool = False


def keyword_key(token: str, provider: TaxonomyProvider | None = None) -> str:
    """Comparison key under which aliases ('k8s', 'kubernetes') compare equal."""
    provider = provider or get_default_taxonomy_provider()
    return provider.format_display_name(token).lower()


def _line_context(line: str) -> str | None:
    if _REQUIRED_RE.search(line):
        return "required"
    if _PREFERRED_RE.search(line):
        return "preferred"
    if _IMPORTANT_RE.search(line):
        return "important"
    return None


def _is_heading(line: str) -> bool:
    stripped = line.strip()
    if not stripped or len(stripped) > _HEADING_MAX_CHARS or is_bullet_like(line):
        return False
    if stripped.endswith(":"):
        return True
    if re.search(r"[.,;]", stripped):
        return False
    return bool(_SECTION_RESET_RE.match(stripped) or _line_context(stripped))


def _context_by_offset(jd_text: str) -> list[tuple[int, int, str | None]]:
    """(start, end, context) spans per JD line, inheriting the nearest heading's context."""
    spans: list[tuple[int, int, str | None]] = []
    section_context: str | None = None
    offset = 0
    for line in jd_text.splitlines(keepends=True):
        start, end = offset, offset + len(line)
        offset = end
        if _is_heading(line):
            section_context = _line_context(line)
            spans.append((start, end, section_context))
            continue
        spans.append((start, end, _line_context(line) or section_context))
    return spans


def _lead_end(jd_text: str) -> int:
    """Offset where the title line plus the lead paragraph end, capped in characters."""
    start = len(jd_text) - len(jd_text.lstrip())
    cap = start + get_scoring_int("gap.lead_paragraph_chars", 300)
    title_end = jd_text.find("\n", start)
    if title_end == -1:
        return min(len(jd_text), cap)
    rest = jd_text[title_end:]
    body_start = title_end + len(rest) - len(rest.lstrip())
    blank = re.search(r"\n\s*\n", jd_text[body_start:])
    end = body_start + blank.start() if blank else len(jd_text)
    return min(end, cap)


def _tier_for(hits: _KeywordHits) -> str:
    if (
        hits.in_lead
        or "required" in hits.contexts
        or hits.occurrences >= get_scoring_int("gap.critical_frequency", 3)
    ):
        return "critical"
    if hits.occurrences == get_scoring_int("gap.important_frequency", 2) or "important" in hits.contexts:
        return "important"
    return "nice"


def _tier_weight(tier: str) -> int:
    defaults = {"critical": 3, "important": 2, "nice": 1}
    return get_scoring_int(f"gap.tier_weights.{tier}", defaults[tier])


def _resume_keys(resume: ResumeDocument, provider: TaxonomyProvider) -> tuple[list[str], set[str]]:
    tokens = extract_skills_in_order(resume.to_text())
    tokens.extend(item.lower() for item in resume.skill_items() if is_valid_tech_skill(item))
    tokens.extend(item.lower() for project in resume.projects for item in project.tech_stack if is_valid_tech_skill(item))

    ordered: list[str] = []
    keys: set[str] = set()
    for token in tokens:
        key = keyword_key(token, provider)
        if key in keys:
            continue
        keys.add(key)
        ordered.append(provider.format_display_name(token))
    return ordered, keys


def _locations(resume: ResumeDocument, variants: set[str]) -> tuple[str, ...]:
    found = []
    for location, text in resume.section_texts().items():
        if any(contains_whole_word(text, variant) for variant in variants):
            found.append(location)
    return tuple(found)


def analyze_gaps(
    resume: ResumeDocument,
    jd_text: str,
    *,
    provider: TaxonomyProvider | None = None,
) -> GapReport:
    """Diff résumé technology tokens against the JD, tiered by importance.

    Fitness is the weighted share of JD keywords the résumé already carries
    (critical 3x, important 2x, nice 1x), and 100 when the JD names none.
    """
    provider = provider or get_default_taxonomy_provider()
    jd_text = jd_text or ""
    spans = _context_by_offset(jd_text)
    lead_end = _lead_end(jd_text)

    hits_by_key: dict[str, _KeywordHits] = {}
    variants_by_key: dict[str, set[str]] = {}
    span_index = 0
    for offset, token in scan_skill_mentions(jd_text):
        key = keyword_key(token, provider)
        hits = hits_by_key.get(key)
        if hits is None:
            hits = _KeywordHits(token=token, position=offset)
            hits_by_key[key] = hits
        variants_by_key.setdefault(key, set()).add(token)
        hits.occurrences += 1
        if offset < lead_end:
            hits.in_lead = True
        while span_index < len(spans) - 1 and spans[span_index][1] <= offset:
            span_index += 1
        if spans:
            context = spans[span_index][2]
            if context:
                hits.contexts.add(context)

    resume_keywords, resume_keys = _resume_keys(resume, provider)
    resume_text = resume.to_text()

    records: list[KeywordRecord] = []
    total_weight = 0
    matched_weight = 0
    for key, hits in hits_by_key.items():
        tier = _tier_for(hits)
        variants = variants_by_key[key] | {key}
        present = key in resume_keys or any(contains_whole_word(resume_text, variant) for variant in variants)
        weight = _tier_weight(tier)
        total_weight += weight
        if present:
            matched_weight += weight
        records.append(
            KeywordRecord(
                keyword=provider.format_display_name(hits.token),
                jd_form=jd_text[hits.position : hits.position + len(hits.token)],
                tier=tier,
                present=present,
                occurrences=hits.occurrences,
                locations=_locations(resume, variants) if present else (),
                position=hits.position,
            )
        )

    fitness = 100.0 if total_weight == 0 else round(matched_weight / total_weight * 100, 1)
    missing = sorted(
        (record for record in records if not record.present),
        key=lambda record: (TIER_RANK[record.tier or "nice"], record.position),
    )
    report = GapReport(
        job_title=extract_job_title(jd_text),
        seniority=detect_seniority(jd_text),
        resume_keywords=tuple(resume_keywords),
        jd_keywords=tuple(records),
        matched=tuple(record.keyword for record in records if record.present),
        missing=tuple(missing),
        fitness=fitness,
    )
    logger.debug(
        "gap_analysis jd_keywords=%s missing=%s fitness=%s",
        len(records),
        len(missing),
        fitness,
    )
    return report
