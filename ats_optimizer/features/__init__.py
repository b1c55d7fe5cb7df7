from .gap_analyzer import analyze_gaps, keyword_key
from .keyword_extractor import (
    clean_skill_items,
    detect_seniority,
    extract_job_title,
    extract_skills_in_order,
    extract_surface_forms,
    extract_valid_skills,
    is_valid_tech_skill,
)
from .profile import detect_user_type, total_years

__all__ = [
    "analyze_gaps",
    "keyword_key",
    "clean_skill_items",
    "detect_seniority",
    "extract_job_title",
    "extract_skills_in_order",
    "extract_surface_forms",
    "extract_valid_skills",
    "is_valid_tech_skill",
    "detect_user_type",
    "total_years",
]
