from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .gap import KeywordRecord


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class SectionOrderCheck(_FrozenModel):
    is_valid: bool
    present_sections: tuple[str, ...] = ()
    expected_order: tuple[str, ...] = ()
    violations: tuple[str, ...] = ()


class WordCountCheck(_FrozenModel):
    is_valid: bool
    total_words: int = Field(ge=0)
    summary_words: int = Field(ge=0)
    violations: tuple[str, ...] = ()


class BulletPatternCheck(_FrozenModel):
    is_valid: bool
    total_bullets: int = Field(ge=0)
    with_action_verb: int = Field(ge=0)
    with_metric: int = Field(ge=0)
    with_technology: int = Field(ge=0)
    metrics_percentage: float = Field(ge=0.0, le=100.0)


class JobTitleCheck(_FrozenModel):
    job_title: str
    in_header: bool
    in_summary: bool
    in_experience: bool
    total_mentions: int = Field(ge=0, le=3)
    is_valid: bool


class ComplianceSubScores(_FrozenModel):
    section_order: int = Field(ge=0, le=100)
    word_count: int = Field(ge=0, le=100)
    bullet_pattern: int = Field(ge=0, le=100)
    job_title: int = Field(ge=0, le=100)
    keywords: int = Field(ge=0, le=100)


class ComplianceReport(_FrozenModel):
    section_order: SectionOrderCheck
    word_count: WordCountCheck
    bullet_pattern: BulletPatternCheck
    job_title: JobTitleCheck
    keyword_frequency: tuple[KeywordRecord, ...] = ()
    sub_scores: ComplianceSubScores
    overall_score: int = Field(ge=0, le=100)
    is_compliant: bool
    recommendations: tuple[str, ...] = ()
