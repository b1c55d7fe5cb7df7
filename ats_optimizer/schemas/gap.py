from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

KeywordTier = Literal["critical", "important", "nice"]
KeywordLocation = Literal["summary", "skills", "experience", "projects"]
Seniority = Literal["intern", "junior", "mid", "senior", "lead"]

TIER_RANK: dict[str, int] = {"critical": 0, "important": 1, "nice": 2}


class KeywordRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    keyword: str
    # First mention exactly as written in the job description.
    jd_form: str = ""
    tier: KeywordTier | None = None
    present: bool = False
    occurrences: int = Field(default=0, ge=0)
    locations: tuple[KeywordLocation, ...] = ()
    position: int = Field(default=0, ge=0)
    is_optimal: bool | None = None


class GapReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    job_title: str
    seniority: Seniority = "mid"
    resume_keywords: tuple[str, ...] = ()
    jd_keywords: tuple[KeywordRecord, ...] = ()
    matched: tuple[str, ...] = ()
    missing: tuple[KeywordRecord, ...] = ()
    fitness: float = Field(default=100.0, ge=0.0, le=100.0)

    def _ranked(self, limit: int) -> list[KeywordRecord]:
        ranked = sorted(self.jd_keywords, key=lambda record: (TIER_RANK[record.tier or "nice"], record.position))
        return ranked[: max(limit, 0)]

    def top_keywords(self, limit: int) -> list[str]:
        return [record.keyword for record in self._ranked(limit)]

    def top_terms(self, limit: int) -> list[str]:
        """Like ``top_keywords`` but in the wording the job description uses."""
        return [record.jd_form or record.keyword for record in self._ranked(limit)]

    def missing_keywords(self) -> list[str]:
        return [record.keyword for record in self.missing]

    def missing_terms(self) -> list[str]:
        """Missing keywords in the wording the job description uses, safe to write into a résumé."""
        return [record.jd_form or record.keyword for record in self.missing]
