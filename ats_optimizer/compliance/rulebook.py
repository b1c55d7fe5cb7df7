from __future__ import annotations

import logging
import math
import re
from collections.abc import Sequence

from ats_optimizer.core.config.scoring import get_scoring_float, get_scoring_int, get_scoring_value
from ats_optimizer.features.keyword_extractor import extract_job_title
from ats_optimizer.normalize.utils import contains_whole_word, count_whole_word, has_metric, leading_word, word_count
from ats_optimizer.schemas.compliance import (
    BulletPatternCheck,
    ComplianceReport,
    ComplianceSubScores,
    JobTitleCheck,
    SectionOrderCheck,
    WordCountCheck,
)
from ats_optimizer.schemas.gap import KeywordRecord
from ats_optimizer.schemas.resume import ResumeDocument

logger = logging.getLogger(__name__)

CANONICAL_SECTION_ORDER: tuple[str, ...] = (
    "header",
    "summary",
    "skills",
    "experience",
    "projects",
    "education",
    "certifications",
)

ACTION_VERBS = frozenset(
    {
        "developed", "implemented", "architected", "optimized", "engineered",
        "designed", "led", "managed", "created", "built", "delivered",
        "achieved", "increased", "reduced", "streamlined", "automated",
        "transformed", "executed", "spearheaded", "established", "deployed",
        "migrated", "scaled", "improved", "enhanced", "integrated",
    }
)

_TECH_PATTERNS = (
    re.compile(r"\b(?:java|python|javascript|react|node|angular|vue|spring|django|flask)\b", re.IGNORECASE),
    re.compile(r"\b(?:aws|azure|gcp|docker|kubernetes|terraform)\b", re.IGNORECASE),
    re.compile(r"\b(?:sql|mysql|postgresql|mongodb|redis)\b", re.IGNORECASE),
    re.compile(r"\b(?:rest|api|microservices|ci/cd|devops)\b", re.IGNORECASE),
    re.compile(r"\b[A-Z][a-z]+(?:[A-Z][a-z]+)+\b"),
)

_DEFAULT_WEIGHTS = {
    "section_order": 0.20,
    "word_count": 0.15,
    "bullet_pattern": 0.25,
    "job_title": 0.20,
    "keywords": 0.20,
}


def _expected_order() -> tuple[str, ...]:
    configured = get_scoring_value("rulebook.section_order", None)
    if isinstance(configured, list) and configured:
        return tuple(str(section) for section in configured)
    return CANONICAL_SECTION_ORDER


def present_sections(resume: ResumeDocument) -> list[str]:
    """Populated sections, in document order when known, else canonical order."""
    populated = {
        "header": bool(resume.name or resume.phone or resume.email),
        "summary": bool(resume.summary_text),
        "skills": bool(resume.skills),
        "experience": bool(resume.work_experience),
        "projects": bool(resume.projects),
        "education": bool(resume.education),
        "certifications": bool(resume.certifications),
    }
    ordered: list[str] = []
    for section in resume.section_order or ():
        if populated.get(section) and section not in ordered:
            ordered.append(section)
    for section in CANONICAL_SECTION_ORDER:
        if populated[section] and section not in ordered:
            ordered.append(section)
    return ordered


def validate_section_order(resume: ResumeDocument) -> SectionOrderCheck:
    actual = present_sections(resume)
    expected = [section for section in _expected_order() if section in actual]
    violations: list[str] = []
    is_valid = True
    for position, section in enumerate(actual):
        wanted = expected[position] if position < len(expected) else ""
        if section != wanted:
            is_valid = False
            violations.append(f"Section '{section}' at position {position + 1} should be '{wanted}'")

    minimum = get_scoring_int("rulebook.min_sections", 5)
    if len(actual) < minimum:
        violations.append(f"Only {len(actual)} sections present, minimum {minimum} recommended")

    return SectionOrderCheck(
        is_valid=is_valid,
        present_sections=tuple(actual),
        expected_order=tuple(expected),
        violations=tuple(violations),
    )


def full_text(resume: ResumeDocument) -> str:
    """Summary plus every experience and project bullet."""
    return " ".join([resume.summary_text, *resume.all_bullets()]).strip()


def _bullets_with_section(resume: ResumeDocument) -> list[tuple[str, str]]:
    bullets = [("experience", bullet) for entry in resume.work_experience for bullet in entry.bullets]
    bullets.extend(("projects", bullet) for project in resume.projects for bullet in project.bullets)
    return bullets


def validate_word_counts(resume: ResumeDocument) -> WordCountCheck:
    total_min = get_scoring_int("rulebook.word_count.total_min", 400)
    total_max = get_scoring_int("rulebook.word_count.total_max", 650)
    summary_min = get_scoring_int("rulebook.word_count.summary_min", 40)
    summary_max = get_scoring_int("rulebook.word_count.summary_max", 60)
    bullet_min = get_scoring_int("rulebook.word_count.bullet_min", 5)
    bullet_max = get_scoring_int("rulebook.word_count.bullet_max", 10)

    total_words = word_count(full_text(resume))
    summary_words = word_count(resume.summary_text)
    violations: list[str] = []

    if total_words < total_min:
        violations.append(f"Total word count {total_words} is below minimum {total_min}")
    if total_words > total_max:
        violations.append(f"Total word count {total_words} exceeds maximum {total_max}")
    if summary_words < summary_min:
        violations.append(f"Summary word count {summary_words} is below minimum {summary_min}")
    if summary_words > summary_max:
        violations.append(f"Summary word count {summary_words} exceeds maximum {summary_max}")

    for section, bullet in _bullets_with_section(resume):
        words = word_count(bullet)
        if words < bullet_min or words > bullet_max:
            violations.append(
                f'{section} bullet "{bullet[:30]}..." has {words} words (target: {bullet_min}-{bullet_max})'
            )

    return WordCountCheck(
        is_valid=not violations,
        total_words=total_words,
        summary_words=summary_words,
        violations=tuple(violations),
    )


def mentions_technology(text: str) -> bool:
    return any(pattern.search(text) for pattern in _TECH_PATTERNS)


def validate_bullet_patterns(resume: ResumeDocument) -> BulletPatternCheck:
    bullets = resume.all_bullets()
    with_metric = sum(1 for bullet in bullets if has_metric(bullet))
    with_verb = sum(1 for bullet in bullets if leading_word(bullet) in ACTION_VERBS)
    with_tech = sum(1 for bullet in bullets if mentions_technology(bullet))

    percentage = round(with_metric / len(bullets) * 100, 2) if bullets else 0.0
    threshold = get_scoring_float("rulebook.bullet_pattern.min_metric_percentage", 75.0)
    return BulletPatternCheck(
        is_valid=bool(bullets) and percentage >= threshold,
        total_bullets=len(bullets),
        with_action_verb=with_verb,
        with_metric=with_metric,
        with_technology=with_tech,
        metrics_percentage=percentage,
    )


def contains_job_title(text: str, job_title: str) -> bool:
    """Exact substring, or enough significant (4+ letter) title words present as whole words."""
    title = job_title.strip().lower()
    if not title or not text:
        return False
    if title in text.lower():
        return True

    title_words = title.split()
    ratio = get_scoring_float("rulebook.title_match_ratio", 0.7)
    matched = [word for word in title_words if len(word) > 3 and contains_whole_word(text, word)]
    return len(matched) >= math.ceil(len(title_words) * ratio)


def validate_job_title_placement(resume: ResumeDocument, job_title: str) -> JobTitleCheck:
    in_header = contains_job_title(resume.target_role, job_title)
    in_summary = contains_job_title(resume.summary_text, job_title)

    in_experience = any(
        contains_job_title(" ".join([entry.role, *entry.bullets]), job_title) for entry in resume.work_experience
    ) or any(
        contains_job_title(" ".join([project.title, *project.bullets]), job_title) for project in resume.projects
    )

    total = int(in_header) + int(in_summary) + int(in_experience)
    return JobTitleCheck(
        job_title=job_title,
        in_header=in_header,
        in_summary=in_summary,
        in_experience=in_experience,
        total_mentions=total,
        is_valid=in_header and in_summary and total >= 2,
    )


def analyze_keyword_frequency(resume: ResumeDocument, top_keywords: Sequence[str]) -> tuple[KeywordRecord, ...]:
    band_min = get_scoring_int("rulebook.keyword_frequency.min", 4)
    band_max = get_scoring_int("rulebook.keyword_frequency.max", 6)
    text = full_text(resume)
    sections = resume.section_texts()

    records: list[KeywordRecord] = []
    for keyword in top_keywords:
        frequency = count_whole_word(text, keyword)
        locations = tuple(
            location for location, section_text in sections.items() if contains_whole_word(section_text, keyword)
        )
        records.append(
            KeywordRecord(
                keyword=keyword,
                present=frequency > 0 or bool(locations),
                occurrences=frequency,
                locations=locations,
                is_optimal=band_min <= frequency <= band_max,
            )
        )
    return tuple(records)


def _recommendations(
    section_order: SectionOrderCheck,
    word_counts: WordCountCheck,
    bullets: BulletPatternCheck,
    title: JobTitleCheck,
    keywords: Sequence[KeywordRecord],
) -> list[str]:
    recommendations: list[str] = []
    if not section_order.is_valid:
        recommendations.append(f"Fix section order: {'; '.join(section_order.violations)}")
    if not word_counts.is_valid:
        recommendations.append(f"Adjust word counts: {'; '.join(word_counts.violations[:3])}")
    if not bullets.is_valid:
        threshold = get_scoring_float("rulebook.bullet_pattern.min_metric_percentage", 75.0)
        needed = max(1, math.ceil((threshold - bullets.metrics_percentage) / 100 * bullets.total_bullets))
        recommendations.append(f"Add quantifiable metrics to {needed} more bullets")
    if not title.is_valid:
        targets = " ".join(
            label
            for label, present in (
                ("Header", title.in_header),
                ("Summary", title.in_summary),
                ("Experience/Projects", title.in_experience),
            )
            if not present
        )
        recommendations.append(f'Add job title "{title.job_title}" to: {targets}')
    suboptimal = [record for record in keywords if not record.is_optimal]
    if suboptimal:
        listed = ", ".join(f"{record.keyword} ({record.occurrences} times)" for record in suboptimal[:3])
        recommendations.append(f"Optimize keyword frequency for: {listed}")
    return recommendations


def validate_compliance(
    resume: ResumeDocument,
    jd_text: str,
    top_keywords: Sequence[str],
) -> ComplianceReport:
    """Run every structural check and fold the sub-scores into one weighted score."""
    job_title = extract_job_title(jd_text)
    section_order = validate_section_order(resume)
    word_counts = validate_word_counts(resume)
    bullets = validate_bullet_patterns(resume)
    title = validate_job_title_placement(resume, job_title)
    keywords = analyze_keyword_frequency(resume, top_keywords)

    order_penalty = get_scoring_int("rulebook.penalties.section_order_violation", 15)
    word_penalty = get_scoring_int("rulebook.penalties.word_count_violation", 10)
    mention_points = get_scoring_int("rulebook.penalties.title_mention", 33)
    optimal = sum(1 for record in keywords if record.is_optimal)

    sub_scores = ComplianceSubScores(
        section_order=100 if section_order.is_valid else max(0, 100 - order_penalty * len(section_order.violations)),
        word_count=100 if word_counts.is_valid else max(0, 100 - word_penalty * len(word_counts.violations)),
        bullet_pattern=100 if bullets.is_valid else round(bullets.metrics_percentage),
        job_title=100 if title.is_valid else min(100, mention_points * title.total_mentions),
        keywords=round(100 * optimal / len(keywords)) if keywords else 100,
    )

    weights = {
        name: get_scoring_float(f"rulebook.weights.{name}", default) for name, default in _DEFAULT_WEIGHTS.items()
    }
    overall = round(sum(getattr(sub_scores, name) * weight for name, weight in weights.items()))
    overall = max(0, min(100, overall))
    threshold = get_scoring_int("rulebook.compliant_threshold", 80)

    report = ComplianceReport(
        section_order=section_order,
        word_count=word_counts,
        bullet_pattern=bullets,
        job_title=title,
        keyword_frequency=keywords,
        sub_scores=sub_scores,
        overall_score=overall,
        is_compliant=overall >= threshold,
        recommendations=tuple(_recommendations(section_order, word_counts, bullets, title, keywords)),
    )
    logger.debug("compliance_validated score=%s compliant=%s", overall, report.is_compliant)
    return report
