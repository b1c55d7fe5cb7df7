from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from .compliance import ComplianceReport
from .gap import GapReport
from .resume import ExtractionMode, ResumeDocument, SkillCategory

ChangeType = Literal["added", "removed", "modified", "rewritten", "cleaned"]
OptimizationMode = Literal["light", "standard", "aggressive"]
UserType = Literal["experienced", "fresher", "student"]


class ChangeLogEntry(BaseModel):
    section: str
    change_type: ChangeType
    before: str | None = None
    after: str | None = None
    description: str


class ScoreSnapshot(BaseModel):
    overall: int = Field(ge=0, le=100)
    fitness: float = Field(ge=0.0, le=100.0)
    compliance: int = Field(ge=0, le=100)
    metric_coverage: float = Field(ge=0.0, le=100.0)
    extraction_penalty: int = Field(default=0, ge=0)


class OptimizationModeConfig(BaseModel):
    add_missing_keywords: bool = True
    rewrite_bullets: bool = True
    restructure_sections: bool = False
    generate_summary: bool = True
    max_changes_per_section: int = Field(default=5, ge=0)


class OptimizationResult(BaseModel):
    optimized_resume: ResumeDocument
    before_score: ScoreSnapshot
    after_score: ScoreSnapshot
    improvement: int
    changes: list[ChangeLogEntry] = Field(default_factory=list)
    compliance: ComplianceReport
    gap: GapReport
    user_type: UserType
    mode: OptimizationMode
    degraded: bool = False
    processing_time_ms: int = Field(default=0, ge=0)


class OptimizeRequest(BaseModel):
    resume: ResumeDocument
    job_description: str = Field(min_length=1)
    target_role: str | None = Field(default=None, max_length=200)
    mode: OptimizationMode = "standard"
    extraction_mode: ExtractionMode = "text"


class ComplianceRequest(BaseModel):
    resume: ResumeDocument
    job_description: str = Field(min_length=1)
    top_keywords: list[str] | None = Field(default=None, max_length=50)


class GapRequest(BaseModel):
    resume: ResumeDocument
    job_description: str = Field(min_length=1)


class SkillClassifyRequest(BaseModel):
    skills: list[str] = Field(min_length=1, max_length=500)


class ClassifiedSkill(BaseModel):
    raw: str
    normalized: str
    category: str | None = None
    display: str


class SkillClassifyResponse(BaseModel):
    skills: list[ClassifiedSkill]
    categories: list[SkillCategory]
    dropped: list[str] = Field(default_factory=list)
