from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

SectionName = Literal[
    "header",
    "summary",
    "skills",
    "experience",
    "projects",
    "education",
    "certifications",
]
ExtractionMode = Literal["text", "ocr", "hybrid"]


def _clean_lines(values: list[str]) -> list[str]:
    return [value.strip() for value in values if isinstance(value, str) and value.strip()]


class WorkExperienceEntry(BaseModel):
    role: str = ""
    company: str = ""
    year: str = ""
    bullets: list[str] = Field(default_factory=list)

    @field_validator("bullets")
    @classmethod
    def _strip_bullets(cls, value: list[str]) -> list[str]:
        return _clean_lines(value)


class ProjectEntry(BaseModel):
    title: str = ""
    tech_stack: list[str] = Field(default_factory=list)
    bullets: list[str] = Field(default_factory=list)

    @field_validator("bullets", "tech_stack")
    @classmethod
    def _strip_lines(cls, value: list[str]) -> list[str]:
        return _clean_lines(value)


class EducationEntry(BaseModel):
    degree: str = ""
    school: str = ""
    year: str = ""
    cgpa: str = ""


class SkillCategory(BaseModel):
    category: str
    items: list[str] = Field(default_factory=list)

    @field_validator("items")
    @classmethod
    def _strip_items(cls, value: list[str]) -> list[str]:
        return _clean_lines(value)


class CertificationEntry(BaseModel):
    title: str
    issuer: str = ""
    year: str = ""


class ResumeDocument(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    linkedin: str = ""
    github: str = ""
    location: str = ""
    target_role: str = ""
    summary: str = ""
    career_objective: str = ""
    work_experience: list[WorkExperienceEntry] = Field(default_factory=list)
    projects: list[ProjectEntry] = Field(default_factory=list)
    education: list[EducationEntry] = Field(default_factory=list)
    skills: list[SkillCategory] = Field(default_factory=list)
    certifications: list[CertificationEntry] = Field(default_factory=list)
    section_order: list[SectionName] | None = None

    @property
    def summary_text(self) -> str:
        return self.summary or self.career_objective

    def skill_items(self) -> list[str]:
        return [item for category in self.skills for item in category.items]

    def all_bullets(self) -> list[str]:
        bullets = [bullet for entry in self.work_experience for bullet in entry.bullets]
        bullets.extend(bullet for project in self.projects for bullet in project.bullets)
        return bullets

    def section_texts(self) -> dict[str, str]:
        """Searchable text per keyword location: summary, skills, experience, projects."""
        experience = [
            " ".join([entry.role, entry.company, *entry.bullets]) for entry in self.work_experience
        ]
        projects = [
            " ".join([project.title, *project.tech_stack, *project.bullets]) for project in self.projects
        ]
        return {
            "summary": self.summary_text,
            "skills": ", ".join(self.skill_items()),
            "experience": "\n".join(experience),
            "projects": "\n".join(projects),
        }

    def to_text(self) -> str:
        """Plain-text rendering used for keyword extraction and oracle prompts."""
        parts: list[str] = []
        header = " | ".join(value for value in (self.email, self.phone, self.location) if value)
        if self.name or header:
            parts.append("\n".join(value for value in (self.name, header) if value))
        if self.target_role:
            parts.append(self.target_role)
        if self.summary_text:
            parts.append(f"SUMMARY\n{self.summary_text}")
        if self.skills:
            lines = [f"{category.category}: {', '.join(category.items)}" for category in self.skills]
            parts.append("SKILLS\n" + "\n".join(lines))
        if self.work_experience:
            lines = []
            for entry in self.work_experience:
                lines.append(f"{entry.role} at {entry.company} ({entry.year})".strip())
                lines.extend(f"- {bullet}" for bullet in entry.bullets)
            parts.append("EXPERIENCE\n" + "\n".join(lines))
        if self.projects:
            lines = []
            for project in self.projects:
                stack = f" ({', '.join(project.tech_stack)})" if project.tech_stack else ""
                lines.append(f"{project.title}{stack}")
                lines.extend(f"- {bullet}" for bullet in project.bullets)
            parts.append("PROJECTS\n" + "\n".join(lines))
        if self.education:
            lines = [" - ".join(value for value in (item.degree, item.school, item.year) if value) for item in self.education]
            parts.append("EDUCATION\n" + "\n".join(lines))
        if self.certifications:
            lines = [" - ".join(value for value in (item.title, item.issuer, item.year) if value) for item in self.certifications]
            parts.append("CERTIFICATIONS\n" + "\n".join(lines))
        return "\n\n".join(parts)
