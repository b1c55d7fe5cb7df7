from __future__ import annotations

from ats_optimizer.compliance.rulebook import validate_compliance
from ats_optimizer.core.config.scoring import get_scoring_float, get_scoring_int
from ats_optimizer.features.gap_analyzer import analyze_gaps
from ats_optimizer.normalize.utils import has_metric
from ats_optimizer.schemas.compliance import ComplianceReport
from ats_optimizer.schemas.gap import GapReport
from ats_optimizer.schemas.optimizer import ScoreSnapshot
from ats_optimizer.schemas.resume import ExtractionMode, ResumeDocument

_DEFAULT_PENALTIES = {"text": 0, "hybrid": 5, "ocr": 10}


def metric_coverage(resume: ResumeDocument) -> float:
    bullets = resume.all_bullets()
    if not bullets:
        return 0.0
    return round(sum(1 for bullet in bullets if has_metric(bullet)) / len(bullets) * 100, 1)


def extraction_penalty(mode: ExtractionMode) -> int:
    return get_scoring_int(f"scoring.extraction_penalty.{mode}", _DEFAULT_PENALTIES.get(mode, 0))


def top_keyword_count() -> int:
    return get_scoring_int("gap.top_keywords", 10)


def score_resume(
    resume: ResumeDocument,
    jd_text: str,
    *,
    gap: GapReport | None = None,
    compliance: ComplianceReport | None = None,
    extraction_mode: ExtractionMode = "text",
) -> ScoreSnapshot:
    """Blend fitness, compliance and metric coverage into one 0-100 score."""
    gap = gap or analyze_gaps(resume, jd_text)
    compliance = compliance or validate_compliance(resume, jd_text, gap.top_terms(top_keyword_count()))
    coverage = metric_coverage(resume)
    penalty = extraction_penalty(extraction_mode)

    weighted = (
        get_scoring_float("scoring.weights.fitness", 0.40) * gap.fitness
        + get_scoring_float("scoring.weights.compliance", 0.40) * compliance.overall_score
        + get_scoring_float("scoring.weights.metric_coverage", 0.20) * coverage
    )
    overall = max(0, min(100, round(weighted) - penalty))
    return ScoreSnapshot(
        overall=overall,
        fitness=gap.fitness,
        compliance=compliance.overall_score,
        metric_coverage=coverage,
        extraction_penalty=penalty,
    )
