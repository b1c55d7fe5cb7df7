from __future__ import annotations

import json
import logging
import os
import re
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from functools import lru_cache
from typing import Any

from openai import OpenAI

from ats_optimizer.core.config import settings
from ats_optimizer.normalize.utils import normalize_line, strip_bullet_prefix
from ats_optimizer.schemas.resume import (
    CertificationEntry,
    EducationEntry,
    ProjectEntry,
    ResumeDocument,
    SkillCategory,
    WorkExperienceEntry,
)

from .errors import MalformedOracleOutput, OracleUnavailable
from .retry import RetryConfig, retry_with_backoff

logger = logging.getLogger(__name__)

REQUIRED_SECTIONS: tuple[str, ...] = ("skills", "projects", "experience")
CONTACT_FIELDS: tuple[str, ...] = ("name", "email", "phone", "linkedin", "github", "location")

_BLOCK_COMMENT_RE = re.compile(r"/\*[\s\S]*?\*/")
_LINE_MARKER_RE = re.compile(r"//\s*Line\s*\d+\s*", re.IGNORECASE)
_TRAILING_COMMENT_RE = re.compile(r"(?<!:)//.*$")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
_LIST_SPLIT_RE = re.compile(r"[\n;]+|,\s*")

_SYSTEM_PROMPT = (
    "You rewrite resumes for applicant tracking systems. Return one JSON object with keys: "
    "name, email, phone, linkedin, github, location, targetRole, summary, careerObjective, "
    "workExperience [{role, company, year, bullets}], projects [{title, techStack, bullets}], "
    "education [{degree, school, year, cgpa}], skills [{category, items}], certifications "
    "[{title, issuer, year}]. Keep every fact from the source resume. Never invent employers, "
    "dates, degrees or technologies that appear in neither the resume nor the job description. "
    "Start each bullet with a strong past-tense action verb and include a measurable result."
)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def oracle_enabled() -> bool:
    if not _env_bool("OPTIMIZER_LLM_ENABLED", True):
        return False
    api_key = (os.getenv("OPENAI_API_KEY") or "").strip()
    return bool(api_key) and not _looks_like_placeholder(api_key)


@lru_cache(maxsize=1)
def _client() -> OpenAI:
    return OpenAI(
        api_key=(os.getenv("OPENAI_API_KEY") or "").strip(),
        base_url=(os.getenv("OPENAI_BASE_URL") or None),
        timeout=float(os.getenv("OPTIMIZER_LLM_TIMEOUT_S", "45")),
        max_retries=0,
    )


def _model() -> str:
    return (os.getenv("AI_MODEL") or os.getenv("OPENAI_MODEL") or "gpt-4o-mini").strip()


def deep_clean_comments(value: Any) -> Any:
    """Strip comment-like markup from every string in a nested payload.

    Removes ``/* */`` blocks, ``// Line N`` markers, whole-line ``//`` comments and
    mid-line ``//`` tails, leaving ``scheme://`` URLs intact.
    """
    if isinstance(value, str):
        text = _BLOCK_COMMENT_RE.sub("", value)
        text = _LINE_MARKER_RE.sub("", text)
        lines = []
        for line in text.split("\n"):
            if line.strip().startswith("//"):
                lines.append("")
                continue
            lines.append(_TRAILING_COMMENT_RE.sub("", line).rstrip())
        return _EXCESS_NEWLINES_RE.sub("\n\n", "\n".join(lines)).strip()
    if isinstance(value, Mapping):
        return {key: deep_clean_comments(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [deep_clean_comments(item) for item in value]
    return value


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] not in (None, "", [], {}):
            return data[key]
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return normalize_line(value)
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return normalize_line(" ".join(_as_text(item) for item in value))
    return ""


def _dedupe(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        key = value.lower()
        if value and key not in seen:
            seen.add(key)
            result.append(value)
    return result


def _as_lines(value: Any) -> list[str]:
    """Bullets from a list, or from a newline-separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        raw = value.split("\n")
    elif isinstance(value, (list, tuple)):
        raw = []
        for item in value:
            if isinstance(item, Mapping):
                raw.append(_as_text(_pick(item, "text", "bullet", "description")))
            else:
                raw.extend(str(item).split("\n") if item is not None else [])
    else:
        return []
    return _dedupe(normalize_line(strip_bullet_prefix(line)) for line in raw)


def _as_items(value: Any) -> list[str]:
    """Skill-like items from a list or a comma/semicolon separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        return _dedupe(normalize_line(part) for part in _LIST_SPLIT_RE.split(value))
    if isinstance(value, (list, tuple)):
        items: list[str] = []
        for item in value:
            items.extend(_as_items(item) if isinstance(item, str) else [_as_text(item)])
        return _dedupe(items)
    return []


def _as_records(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, Mapping):
        return [value]
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _coerce_skills(value: Any) -> list[SkillCategory]:
    categories: list[SkillCategory] = []
    if isinstance(value, Mapping) and not {"category", "items", "list"} & set(value):
        pairs = list(value.items())
    else:
        pairs = []
        loose: list[str] = []
        for record in _as_records(value) if not isinstance(value, str) else [value]:
            if isinstance(record, Mapping):
                pairs.append((_as_text(_pick(record, "category", "name", "title")) or "Skills",
                              _pick(record, "items", "list", "skills", "values")))
            elif isinstance(record, str):
                loose.extend(_as_items(record))
        if loose:
            pairs.append(("Skills", loose))

    seen: set[str] = set()
    for category, items in pairs:
        unique = [item for item in _as_items(items) if item.lower() not in seen]
        seen.update(item.lower() for item in unique)
        if unique:
            categories.append(SkillCategory(category=_as_text(category) or "Skills", items=unique))
    return categories


def _coerce_work(value: Any) -> list[WorkExperienceEntry]:
    entries: list[WorkExperienceEntry] = []
    seen: set[tuple[str, str]] = set()
    for record in _as_records(value):
        if not isinstance(record, Mapping):
            continue
        entry = WorkExperienceEntry(
            role=_as_text(_pick(record, "role", "title", "position", "jobTitle")),
            company=_as_text(_pick(record, "company", "organization", "employer")),
            year=_as_text(_pick(record, "year", "years", "duration", "dates", "period")),
            bullets=_as_lines(_pick(record, "bullets", "responsibilities", "achievements", "description")),
        )
        key = (entry.role.lower(), entry.company.lower())
        if key in seen or not (entry.role or entry.company or entry.bullets):
            continue
        seen.add(key)
        entries.append(entry)
    return entries


def _coerce_projects(value: Any) -> list[ProjectEntry]:
    projects: list[ProjectEntry] = []
    seen: set[str] = set()
    for record in _as_records(value):
        if not isinstance(record, Mapping):
            continue
        project = ProjectEntry(
            title=_as_text(_pick(record, "title", "name", "projectName")),
            tech_stack=_as_items(_pick(record, "techStack", "tech_stack", "technologies", "stack")),
            bullets=_as_lines(_pick(record, "bullets", "description", "details", "highlights")),
        )
        key = project.title.lower()
        if key in seen or not (project.title or project.bullets):
            continue
        seen.add(key)
        projects.append(project)
    return projects


def _coerce_education(value: Any) -> list[EducationEntry]:
    entries: list[EducationEntry] = []
    for record in _as_records(value):
        if not isinstance(record, Mapping):
            continue
        entry = EducationEntry(
            degree=_as_text(_pick(record, "degree", "qualification")),
            school=_as_text(_pick(record, "school", "institution", "university", "college")),
            year=_as_text(_pick(record, "year", "years", "graduationYear")),
            cgpa=_as_text(_pick(record, "cgpa", "gpa", "grade")),
        )
        if (entry.degree or entry.school) and entry not in entries:
            entries.append(entry)
    return entries


def _coerce_certifications(value: Any) -> list[CertificationEntry]:
    certifications: list[CertificationEntry] = []
    seen: set[str] = set()
    for record in _as_records(value) if not isinstance(value, str) else _as_lines(value):
        if isinstance(record, Mapping):
            title = _as_text(_pick(record, "title", "name", "certification"))
            issuer = _as_text(_pick(record, "issuer", "organization", "provider"))
            year = _as_text(_pick(record, "year", "date"))
        else:
            title, issuer, year = _as_text(record), "", ""
        if title and title.lower() not in seen:
            seen.add(title.lower())
            certifications.append(CertificationEntry(title=title, issuer=issuer, year=year))
    return certifications


def coerce_resume_payload(
    payload: Mapping[str, Any],
    *,
    contact: Mapping[str, str] | None = None,
    target_role: str | None = None,
    required: Sequence[str] = REQUIRED_SECTIONS,
) -> ResumeDocument:
    """Turn a loosely shaped oracle payload into a ``ResumeDocument``.

    Raises ``MalformedOracleOutput`` carrying the partial document when a
    required section is missing or empty.
    """
    document = ResumeDocument(
        name=_as_text(_pick(payload, "name", "fullName")),
        email=_as_text(_pick(payload, "email")),
        phone=_as_text(_pick(payload, "phone", "phoneNumber")),
        linkedin=_as_text(_pick(payload, "linkedin", "linkedIn")),
        github=_as_text(_pick(payload, "github", "gitHub")),
        location=_as_text(_pick(payload, "location")),
        target_role=target_role or _as_text(_pick(payload, "targetRole", "target_role")),
        summary=_as_text(_pick(payload, "summary", "professionalSummary")),
        career_objective=_as_text(_pick(payload, "careerObjective", "career_objective", "objective")),
        work_experience=_coerce_work(_pick(payload, "workExperience", "work_experience", "experience")),
        projects=_coerce_projects(_pick(payload, "projects")),
        education=_coerce_education(_pick(payload, "education")),
        skills=_coerce_skills(_pick(payload, "skills", "technicalSkills")),
        certifications=_coerce_certifications(_pick(payload, "certifications", "certificates")),
    )
    for field_name in CONTACT_FIELDS:
        override = (contact or {}).get(field_name)
        if override:
            setattr(document, field_name, override)

    populated = {
        "skills": bool(document.skills),
        "projects": bool(document.projects),
        "experience": bool(document.work_experience),
    }
    missing = tuple(section for section in required if not populated.get(section, True))
    if missing:
        raise MalformedOracleOutput(
            f"Rewrite is missing required sections: {', '.join(missing)}",
            partial=document,
            missing=missing,
        )
    return document


def _build_user_prompt(
    resume_text: str,
    jd_text: str,
    *,
    user_type: str,
    target_role: str | None,
) -> str:
    role_line = f"Target role: {target_role}\n" if target_role else ""
    return (
        f"Candidate experience tier: {user_type}\n{role_line}\n"
        f"JOB DESCRIPTION:\n{jd_text}\n\nRESUME:\n{resume_text}"
    )


def _request_rewrite(system_prompt: str, user_prompt: str) -> str:
    response = _client().chat.completions.create(
        model=_model(),
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        temperature=0.3,
        response_format={"type": "json_object"},
        max_tokens=3000,
    )
    return response.choices[0].message.content if response.choices else ""


def rewrite_resume(
    resume_text: str,
    jd_text: str,
    *,
    user_type: str,
    contact: Mapping[str, str] | None = None,
    target_role: str | None = None,
    required: Sequence[str] = REQUIRED_SECTIONS,
    retry_config: RetryConfig | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> ResumeDocument:
    if not oracle_enabled():
        raise OracleUnavailable("Rewrite oracle is disabled or not configured.", code="oracle_disabled")

    config = retry_config or RetryConfig(
        max_attempts=settings.oracle_max_attempts,
        base_delay=settings.oracle_initial_delay_s,
    )
    user_prompt = _build_user_prompt(resume_text, jd_text, user_type=user_type, target_role=target_role)
    started = time.perf_counter()
    try:
        content = retry_with_backoff(_request_rewrite, config, _SYSTEM_PROMPT, user_prompt, sleep=sleep)
    except Exception as exc:  # noqa: BLE001 - every failure degrades to the deterministic path
        logger.warning("rewrite_oracle_failed model=%s prompt_len=%s: %s", _model(), len(user_prompt), exc)
        raise OracleUnavailable(f"Rewrite oracle failed: {exc}") from exc

    latency_ms = int((time.perf_counter() - started) * 1000)
    try:
        parsed = json.loads(content or "")
    except json.JSONDecodeError:
        parsed = None
    if not isinstance(parsed, dict):
        logger.warning("rewrite_oracle_invalid_json model=%s latency_ms=%s", _model(), latency_ms)
        partial = ResumeDocument()
        raise MalformedOracleOutput(
            "Rewrite oracle returned a non-object payload.",
            partial=partial,
            missing=tuple(required),
        )

    logger.info("rewrite_oracle_completed model=%s latency_ms=%s", _model(), latency_ms)
    return coerce_resume_payload(
        deep_clean_comments(parsed),
        contact=contact,
        target_role=target_role,
        required=required,
    )
