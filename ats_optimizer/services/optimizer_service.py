from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from ats_optimizer.compliance.rulebook import CANONICAL_SECTION_ORDER, validate_compliance, validate_section_order
from ats_optimizer.core.config import settings
from ats_optimizer.core.config.scoring import get_scoring_int, get_scoring_value
from ats_optimizer.features.gap_analyzer import analyze_gaps, keyword_key
from ats_optimizer.features.keyword_extractor import clean_skill_items
from ats_optimizer.features.profile import detect_user_type
from ats_optimizer.normalize.utils import contains_whole_word, word_count
from ats_optimizer.repair import generate_summary, repair_resume
from ats_optimizer.schemas.gap import GapReport
from ats_optimizer.schemas.optimizer import (
    ChangeLogEntry,
    OptimizationMode,
    OptimizationModeConfig,
    OptimizationResult,
    UserType,
)
from ats_optimizer.schemas.resume import ExtractionMode, ResumeDocument, SkillCategory
from ats_optimizer.taxonomy import TaxonomyProvider, aggregate_categories, get_default_taxonomy_provider

from .errors import InputTooLarge, MalformedOracleOutput, OracleUnavailable
from .rewrite_oracle import CONTACT_FIELDS, rewrite_resume
from .scoring import score_resume, top_keyword_count
from .section_merge import merge_sections

logger = logging.getLogger(__name__)

RewriteOracle = Callable[..., ResumeDocument]

_DEFAULT_MODES: dict[str, dict[str, Any]] = {
    "light": {
        "add_missing_keywords": True,
        "rewrite_bullets": False,
        "restructure_sections": False,
        "generate_summary": False,
        "max_changes_per_section": 2,
    },
    "standard": {
        "add_missing_keywords": True,
        "rewrite_bullets": True,
        "restructure_sections": False,
        "generate_summary": True,
        "max_changes_per_section": 5,
    },
    "aggressive": {
        "add_missing_keywords": True,
        "rewrite_bullets": True,
        "restructure_sections": True,
        "generate_summary": True,
        "max_changes_per_section": 10,
    },
}
_SUMMARY_MIN_KEYWORDS = 3


def mode_config(mode: OptimizationMode) -> OptimizationModeConfig:
    if mode not in _DEFAULT_MODES:
        raise ValueError(f"Unknown optimization mode '{mode}'")
    configured = get_scoring_value(f"modes.{mode}", None)
    values = dict(_DEFAULT_MODES[mode])
    if isinstance(configured, dict):
        values.update(configured)
    return OptimizationModeConfig(**values)


def check_input_size(resume: ResumeDocument, jd_text: str) -> None:
    size = len(resume.to_text()) + len(jd_text or "")
    if size > settings.max_input_chars:
        raise InputTooLarge(size, settings.max_input_chars)


def _required_sections(resume: ResumeDocument) -> tuple[str, ...]:
    populated = {
        "skills": bool(resume.skills),
        "projects": bool(resume.projects),
        "experience": bool(resume.work_experience),
    }
    return tuple(section for section, present in populated.items() if present)


def _run_oracle(
    oracle: RewriteOracle,
    resume: ResumeDocument,
    jd_text: str,
    *,
    user_type: UserType,
    target_role: str,
    changes: list[ChangeLogEntry],
) -> tuple[ResumeDocument | None, bool]:
    """Return (rewritten document or None, degraded flag)."""
    contact = {name: getattr(resume, name) for name in CONTACT_FIELDS if getattr(resume, name)}
    try:
        rewritten = oracle(
            resume.to_text(),
            jd_text,
            user_type=user_type,
            contact=contact,
            target_role=target_role,
            required=_required_sections(resume),
        )
    except OracleUnavailable as exc:
        logger.warning("optimize_oracle_unavailable code=%s: %s", exc.code, exc)
        changes.append(
            ChangeLogEntry(
                section="document",
                change_type="modified",
                description="Rewrite service unavailable; optimized the original resume deterministically",
            )
        )
        return None, True
    except MalformedOracleOutput as exc:
        logger.warning("optimize_oracle_malformed missing=%s", ",".join(exc.missing))
        changes.append(
            ChangeLogEntry(
                section="document",
                change_type="modified",
                description=f"Restored sections from the original resume: {', '.join(exc.missing)}",
            )
        )
        return exc.partial, False

    changes.append(
        ChangeLogEntry(
            section="document",
            change_type="rewritten",
            description="Rewrote resume content for the job description",
        )
    )
    return rewritten, False


def _clean_skills(document: ResumeDocument, changes: list[ChangeLogEntry]) -> None:
    cleaned: list[SkillCategory] = []
    for category in document.skills:
        kept, removed = clean_skill_items(category.items)
        for item in removed:
            changes.append(
                ChangeLogEntry(
                    section="skills",
                    change_type="cleaned",
                    before=item,
                    description=f"Removed non-skill entry from {category.category}",
                )
            )
        if kept:
            cleaned.append(SkillCategory(category=category.category, items=kept))
    document.skills = cleaned


def _add_missing_keywords(
    document: ResumeDocument,
    gap: GapReport,
    *,
    limit: int,
    provider: TaxonomyProvider,
    changes: list[ChangeLogEntry],
) -> None:
    existing = {keyword_key(item, provider) for item in document.skill_items()}
    added = 0
    for keyword in gap.missing_terms():
        if added >= limit:
            break
        if keyword_key(keyword, provider) in existing:
            continue
        category_name = provider.classify(keyword) or "Tools & Platforms"
        target = next((category for category in document.skills if category.category == category_name), None)
        if target is None:
            target = SkillCategory(category=category_name, items=[])
            document.skills.append(target)
        target.items.append(keyword)
        existing.add(keyword_key(keyword, provider))
        added += 1
        changes.append(
            ChangeLogEntry(
                section="skills",
                change_type="added",
                after=keyword,
                description=f"Added missing job keyword to {category_name}",
            )
        )


def _summary_needs_rewrite(summary: str, keywords: list[str]) -> bool:
    if not summary.strip():
        return True
    if word_count(summary) < get_scoring_int("summary.min_words", 40):
        return True
    mentioned = sum(1 for keyword in keywords if contains_whole_word(summary, keyword))
    return mentioned < min(_SUMMARY_MIN_KEYWORDS, len(keywords))


def _enrich(
    base: ResumeDocument,
    gap: GapReport,
    config: OptimizationModeConfig,
    *,
    user_type: UserType,
    target_role: str,
    provider: TaxonomyProvider,
    changes: list[ChangeLogEntry],
) -> ResumeDocument:
    """Deterministic second pass over the rewritten (or original) document."""
    document = base.model_copy(deep=True)

    if not document.target_role and target_role:
        document.target_role = target_role
        changes.append(
            ChangeLogEntry(section="header", change_type="added", after=target_role, description="Added target role")
        )

    _clean_skills(document, changes)

    if config.add_missing_keywords:
        _add_missing_keywords(
            document, gap, limit=config.max_changes_per_section, provider=provider, changes=changes
        )

    keywords = gap.top_terms(top_keyword_count())
    if config.generate_summary and _summary_needs_rewrite(document.summary_text, keywords):
        before = document.summary_text
        summary_keywords = gap.top_terms(get_scoring_int("summary.max_keywords", 5))
        document.summary = generate_summary(
            document, summary_keywords, user_type=user_type, target_role=target_role
        )
        changes.append(
            ChangeLogEntry(
                section="summary",
                change_type="rewritten" if before else "added",
                before=before or None,
                after=document.summary,
                description="Generated a summary aligned with the job description",
            )
        )

    if config.restructure_sections and not validate_section_order(document).is_valid:
        changes.append(
            ChangeLogEntry(
                section="document",
                change_type="modified",
                before=", ".join(document.section_order or ()),
                after=", ".join(CANONICAL_SECTION_ORDER),
                description="Reordered sections into the standard ATS order",
            )
        )
        document.section_order = list(CANONICAL_SECTION_ORDER)
    return document


def _reclassify_skills(
    document: ResumeDocument,
    provider: TaxonomyProvider,
    changes: list[ChangeLogEntry],
) -> None:
    aggregation = aggregate_categories(provider, document.skills)
    if not aggregation.categories:
        return
    for duplicate in aggregation.duplicates:
        changes.append(
            ChangeLogEntry(
                section="skills",
                change_type="cleaned",
                before=duplicate,
                description="Removed duplicate skill",
            )
        )
    document.skills = aggregation.categories


def optimize_resume(
    resume: ResumeDocument,
    jd_text: str,
    *,
    target_role: str | None = None,
    mode: OptimizationMode = "standard",
    extraction_mode: ExtractionMode = "text",
    oracle: RewriteOracle | None = None,
) -> OptimizationResult:
    """Score, rewrite, repair and re-score a résumé against a job description.

    An unavailable oracle degrades to the deterministic path instead of failing;
    only ``InputTooLarge`` escapes.
    """
    started = time.perf_counter()
    check_input_size(resume, jd_text)
    config = mode_config(mode)
    provider = get_default_taxonomy_provider()

    gap = analyze_gaps(resume, jd_text, provider=provider)
    top_keywords = gap.top_terms(top_keyword_count())
    before_compliance = validate_compliance(resume, jd_text, top_keywords)
    before_score = score_resume(
        resume, jd_text, gap=gap, compliance=before_compliance, extraction_mode=extraction_mode
    )
    user_type = detect_user_type(resume)
    role = (target_role or resume.target_role or gap.job_title).strip()

    changes: list[ChangeLogEntry] = []
    rewritten: ResumeDocument | None = None
    degraded = False
    if config.rewrite_bullets:
        rewritten, degraded = _run_oracle(
            oracle or rewrite_resume,
            resume,
            jd_text,
            user_type=user_type,
            target_role=role,
            changes=changes,
        )

    enriched = _enrich(
        merge_sections(rewritten, None, resume),
        gap,
        config,
        user_type=user_type,
        target_role=role,
        provider=provider,
        changes=changes,
    )
    merged = merge_sections(enriched, rewritten, resume)

    repair = repair_resume(
        merged,
        jd_text,
        jd_keywords=[record.keyword for record in gap.jd_keywords],
        missing_keywords=gap.missing_terms(),
    )
    changes.extend(repair.changes)
    optimized = repair.resume
    _reclassify_skills(optimized, provider, changes)

    after_gap = analyze_gaps(optimized, jd_text, provider=provider)
    compliance = validate_compliance(optimized, jd_text, top_keywords)
    after_score = score_resume(optimized, jd_text, gap=after_gap, compliance=compliance, extraction_mode="text")

    elapsed_ms = int((time.perf_counter() - started) * 1000)
    logger.info(
        "optimize_completed mode=%s before=%s after=%s degraded=%s changes=%s elapsed_ms=%s",
        mode,
        before_score.overall,
        after_score.overall,
        degraded,
        len(changes),
        elapsed_ms,
    )
    return OptimizationResult(
        optimized_resume=optimized,
        before_score=before_score,
        after_score=after_score,
        improvement=after_score.overall - before_score.overall,
        changes=changes,
        compliance=compliance,
        gap=after_gap,
        user_type=user_type,
        mode=mode,
        degraded=degraded,
        processing_time_ms=elapsed_ms,
    )
