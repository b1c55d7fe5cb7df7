from __future__ import annotations

from typing import Any

from ats_optimizer.schemas.resume import ResumeDocument

MERGED_FIELDS: tuple[str, ...] = (
    "name",
    "email",
    "phone",
    "linkedin",
    "github",
    "location",
    "target_role",
    "summary",
    "career_objective",
    "work_experience",
    "projects",
    "education",
    "skills",
    "certifications",
    "section_order",
)


def _is_populated(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict)):
        return bool(value)
    return True


def merge_sections(
    primary: ResumeDocument | None,
    secondary: ResumeDocument | None,
    original: ResumeDocument,
) -> ResumeDocument:
    """Per field, keep the most recent non-empty value: primary, then secondary, then original.

    A field the original had populated never comes back empty.
    """
    merged: dict[str, Any] = {}
    for field_name in MERGED_FIELDS:
        chosen = getattr(original, field_name)
        for candidate in (primary, secondary):
            if candidate is None:
                continue
            value = getattr(candidate, field_name)
            if _is_populated(value):
                chosen = value
                break
        merged[field_name] = chosen
    return ResumeDocument(**merged).model_copy(deep=True)
