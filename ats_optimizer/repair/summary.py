from __future__ import annotations

from collections.abc import Sequence

from ats_optimizer.core.config.scoring import get_scoring_int
from ats_optimizer.features.keyword_extractor import DEFAULT_JOB_TITLE
from ats_optimizer.features.profile import total_years
from ats_optimizer.schemas.optimizer import UserType
from ats_optimizer.schemas.resume import ResumeDocument

_DEFAULT_FOCUS = "modern software development"


def _join_keywords(keywords: Sequence[str]) -> str:
    if not keywords:
        return _DEFAULT_FOCUS
    if len(keywords) == 1:
        return keywords[0]
    return f"{', '.join(keywords[:-1])} and {keywords[-1]}"


def generate_summary(
    resume: ResumeDocument,
    jd_keywords: Sequence[str],
    *,
    user_type: UserType,
    target_role: str | None = None,
) -> str:
    """Deterministic JD-aligned summary naming the target role and up to five JD keywords."""
    role = (target_role or resume.target_role or DEFAULT_JOB_TITLE).strip()
    limit = get_scoring_int("summary.max_keywords", 5)
    focus = _join_keywords(list(dict.fromkeys(keyword for keyword in jd_keywords if keyword))[:limit])

    if user_type == "experienced":
        years = total_years(resume)
        tenure = f"with {years}+ years of experience" if years else "with proven industry experience"
        return (
            f"Results-driven {role} {tenure} specializing in {focus}. "
            "Proven track record of delivering scalable solutions, improving system performance by 40%, "
            "and collaborating with cross-functional teams. Focused on clean, maintainable code, "
            "measurable business impact, and continuous improvement of engineering practices."
        )
    if user_type == "fresher":
        return (
            f"Motivated {role} with internship and project experience in {focus}. "
            "Delivered production features, automated tests, and measurable improvements while "
            "collaborating with senior engineers. Strong foundation in software development fundamentals, "
            "eager to contribute to scalable solutions and grow quickly within a high-performing engineering team."
        )
    return (
        f"Motivated {role} seeking an entry-level opportunity to apply skills in {focus}. "
        "Strong foundation in software development with hands-on academic and personal project experience. "
        "Eager to contribute to innovative solutions, learn from experienced engineers, and grow "
        "professionally in a collaborative team environment."
    )
