import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_optimizer.compliance.rulebook import (  # noqa: E402
    analyze_keyword_frequency,
    contains_job_title,
    validate_bullet_patterns,
    validate_compliance,
    validate_job_title_placement,
    validate_section_order,
    validate_word_counts,
)
from ats_optimizer.schemas.resume import (  # noqa: E402
    EducationEntry,
    ResumeDocument,
    SkillCategory,
    WorkExperienceEntry,
)

JD_TEXT = "Senior Java Developer\nWe need Java, Spring Boot and Docker experience."


def _resume_with_docker_mentions(count: int) -> ResumeDocument:
    bullets = [f"Shipped Docker images for {index + 2} services" for index in range(count)]
    return ResumeDocument(
        name="Ana Silva",
        email="ana@example.com",
        work_experience=[WorkExperienceEntry(role="Engineer", company="Acme", bullets=bullets)],
    )


def _java_resume(**overrides) -> ResumeDocument:
    values = dict(
        name="Ana Silva",
        email="ana@example.com",
        target_role="Senior Java Developer",
        summary="Senior software engineer with 8 years of backend experience seeking a Java Developer role.",
        skills=[SkillCategory(category="Programming Languages", items=["Java"])],
        work_experience=[
            WorkExperienceEntry(
                role="Backend Engineer",
                company="Acme",
                year="2016 - 2024",
                bullets=["Built payment APIs serving 2M users"],
            )
        ],
        education=[EducationEntry(degree="BSc Computer Science", school="State University")],
    )
    values.update(overrides)
    return ResumeDocument(**values)


class KeywordFrequencyTests(unittest.TestCase):
    def test_five_mentions_is_optimal(self):
        (record,) = analyze_keyword_frequency(_resume_with_docker_mentions(5), ["Docker"])
        self.assertEqual(record.occurrences, 5)
        self.assertTrue(record.is_optimal)
        self.assertEqual(record.locations, ("experience",))

    def test_seven_mentions_is_stuffing(self):
        (record,) = analyze_keyword_frequency(_resume_with_docker_mentions(7), ["Docker"])
        self.assertEqual(record.occurrences, 7)
        self.assertFalse(record.is_optimal)

    def test_matches_whole_words_only(self):
        resume = ResumeDocument(summary="JavaScript engineer who also writes Java daily.")
        (record,) = analyze_keyword_frequency(resume, ["Java"])
        self.assertEqual(record.occurrences, 1)


class JobTitleTests(unittest.TestCase):
    def test_title_in_header_and_summary_is_valid(self):
        check = validate_job_title_placement(_java_resume(), "Senior Java Developer")
        self.assertTrue(check.in_header)
        self.assertTrue(check.in_summary)
        self.assertFalse(check.in_experience)
        self.assertEqual(check.total_mentions, 2)
        self.assertTrue(check.is_valid)

    def test_partial_title_needs_enough_significant_words(self):
        self.assertTrue(contains_job_title("Experienced java developer", "Java Developer"))
        self.assertFalse(contains_job_title("Java developer needed", "Senior Java Developer"))
        self.assertFalse(contains_job_title("", "Java Developer"))

    def test_missing_header_title_is_invalid(self):
        check = validate_job_title_placement(_java_resume(target_role=""), "Senior Java Developer")
        self.assertFalse(check.in_header)
        self.assertFalse(check.is_valid)


class StructureTests(unittest.TestCase):
    def test_canonical_order_is_valid(self):
        check = validate_section_order(_java_resume())
        self.assertTrue(check.is_valid)
        self.assertEqual(check.present_sections, ("header", "summary", "skills", "experience", "education"))

    def test_out_of_order_sections_are_reported(self):
        resume = _java_resume(section_order=["header", "experience", "summary", "skills", "education"])
        check = validate_section_order(resume)
        self.assertFalse(check.is_valid)
        self.assertIn("Section 'experience' at position 2 should be 'summary'", check.violations)

    def test_no_bullets_is_zero_percent(self):
        check = validate_bullet_patterns(ResumeDocument(name="Ana"))
        self.assertEqual(check.total_bullets, 0)
        self.assertEqual(check.metrics_percentage, 0.0)
        self.assertFalse(check.is_valid)

    def test_bullet_metrics_percentage(self):
        resume = _java_resume(
            work_experience=[
                WorkExperienceEntry(
                    role="Engineer",
                    bullets=["Built payment APIs serving 2M users", "Maintained legacy Java code"],
                )
            ]
        )
        check = validate_bullet_patterns(resume)
        self.assertEqual(check.with_metric, 1)
        self.assertEqual(check.metrics_percentage, 50.0)
        self.assertEqual(check.with_action_verb, 1)
        self.assertFalse(check.is_valid)

    def test_short_summary_is_flagged(self):
        check = validate_word_counts(_java_resume())
        self.assertFalse(check.is_valid)
        self.assertIn("Summary word count 14 is below minimum 40", check.violations)


class ComplianceReportTests(unittest.TestCase):
    def test_report_is_bounded_and_deterministic(self):
        first = validate_compliance(_java_resume(), JD_TEXT, ["Java", "Docker"])
        second = validate_compliance(_java_resume(), JD_TEXT, ["Java", "Docker"])
        self.assertEqual(first, second)
        self.assertGreaterEqual(first.overall_score, 0)
        self.assertLessEqual(first.overall_score, 100)
        self.assertEqual(first.job_title.job_title, "Senior Java Developer")
        self.assertEqual(first.is_compliant, first.overall_score >= 80)

    def test_no_keywords_scores_full_keyword_marks(self):
        report = validate_compliance(_java_resume(), JD_TEXT, [])
        self.assertEqual(report.sub_scores.keywords, 100)
        self.assertEqual(report.keyword_frequency, ())

    def test_recommendations_name_the_gaps(self):
        report = validate_compliance(_java_resume(), JD_TEXT, ["Docker"])
        self.assertTrue(any(item.startswith("Adjust word counts") for item in report.recommendations))
        self.assertIn("Optimize keyword frequency for: Docker (0 times)", report.recommendations)


if __name__ == "__main__":
    unittest.main()
