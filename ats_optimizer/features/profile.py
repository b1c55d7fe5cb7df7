from __future__ import annotations

import re
from datetime import date

from ats_optimizer.schemas.optimizer import UserType
from ats_optimizer.schemas.resume import ResumeDocument

_YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")
_ONGOING_RE = re.compile(r"\b(present|current|now|ongoing|till date)\b", re.IGNORECASE)
_INTERN_RE = re.compile(r"\b(intern|internship|trainee|apprentice)\b", re.IGNORECASE)


def entry_years(year_text: str, *, today: date | None = None) -> int:
    years = [int(value) for value in _YEAR_RE.findall(year_text or "")]
    if _ONGOING_RE.search(year_text or ""):
        years.append((today or date.today()).year)
    if len(years) < 2:
        return 0
    return max(0, max(years) - min(years))


def total_years(resume: ResumeDocument, *, today: date | None = None) -> int:
    return sum(entry_years(entry.year, today=today) for entry in resume.work_experience)


def detect_user_type(resume: ResumeDocument, *, today: date | None = None) -> UserType:
    """experienced: >= 3 years or >= 2 jobs; fresher: an internship or one job; else student."""
    jobs = len(resume.work_experience)
    if total_years(resume, today=today) >= 3 or jobs >= 2:
        return "experienced"
    if jobs == 1 or any(_INTERN_RE.search(entry.role) for entry in resume.work_experience):
        return "fresher"
    return "student"
