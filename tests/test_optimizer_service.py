import os
import sys
import unittest
from dataclasses import replace
from pathlib import Path
from unittest.mock import Mock, patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_optimizer.compliance.rulebook import CANONICAL_SECTION_ORDER  # noqa: E402
from ats_optimizer.normalize.utils import contains_whole_word, has_metric  # noqa: E402
from ats_optimizer.schemas.resume import (  # noqa: E402
    EducationEntry,
    ResumeDocument,
    SkillCategory,
    WorkExperienceEntry,
)
from ats_optimizer.services import optimizer_service  # noqa: E402
from ats_optimizer.services.errors import InputTooLarge, MalformedOracleOutput  # noqa: E402

JD_TEXT = (
    "Platform Engineer\n"
    "We are hiring a platform engineer to run Kubernetes and Terraform on AWS.\n"
    "\n"
    "Requirements:\n"
    "- Kubernetes\n"
    "- Terraform\n"
    "- Python\n"
)


def _resume(**overrides) -> ResumeDocument:
    values = dict(
        name="Ana Silva",
        email="ana@example.com",
        phone="+1 555 010 2020",
        summary="Engineer who likes building things.",
        skills=[SkillCategory(category="Languages", items=["Python", "Team Player"])],
        work_experience=[
            WorkExperienceEntry(
                role="Software Engineer",
                company="Acme",
                year="2021 - 2024",
                bullets=[
                    "Worked on deployment scripts",
                    "Responsible for the internal dashboard",
                    "Helped with on-call rotations",
                ],
            ),
            WorkExperienceEntry(
                role="Junior Developer",
                company="Globex",
                year="2019 - 2021",
                bullets=["Fixed bugs in the billing service"],
            ),
        ],
        education=[EducationEntry(degree="BSc Computer Science", school="State University", year="2019")],
    )
    values.update(overrides)
    return ResumeDocument(**values)


class OptimizerServiceTests(unittest.TestCase):
    def setUp(self):
        env = patch.dict(os.environ, {"OPTIMIZER_LLM_ENABLED": "0"})
        env.start()
        self.addCleanup(env.stop)

    def test_degraded_run_still_improves_the_resume(self):
        result = optimizer_service.optimize_resume(_resume(), JD_TEXT)
        optimized = result.optimized_resume

        self.assertTrue(result.degraded)
        self.assertEqual(result.mode, "standard")
        self.assertEqual(result.user_type, "experienced")
        self.assertGreater(result.after_score.overall, result.before_score.overall)
        self.assertEqual(result.improvement, result.after_score.overall - result.before_score.overall)
        self.assertEqual(result.after_score.metric_coverage, 100.0)
        self.assertTrue(all(has_metric(bullet) for bullet in optimized.all_bullets()))
        for entry in optimized.work_experience:
            self.assertEqual(len(entry.bullets), 3)

    def test_missing_keywords_land_in_skills_and_garbage_is_cleaned(self):
        result = optimizer_service.optimize_resume(_resume(), JD_TEXT)
        items = result.optimized_resume.skill_items()

        self.assertIn("Kubernetes", items)
        self.assertIn("Terraform", items)
        self.assertIn("AWS", items)
        self.assertNotIn("Team Player", items)
        self.assertEqual(result.gap.fitness, 100.0)
        self.assertTrue(
            any(change.change_type == "cleaned" and change.before == "Team Player" for change in result.changes)
        )

    def test_summary_and_title_are_aligned(self):
        result = optimizer_service.optimize_resume(_resume(), JD_TEXT)
        optimized = result.optimized_resume

        self.assertEqual(optimized.target_role, "Platform Engineer")
        self.assertIn("Platform Engineer", optimized.summary)
        self.assertTrue(result.compliance.job_title.in_header)
        self.assertTrue(result.compliance.job_title.in_summary)

    def test_rewrites_reuse_job_description_wording(self):
        jd_text = "Platform Engineer\nWe need k8s and Postgres experience.\n"
        result = optimizer_service.optimize_resume(_resume(), jd_text)
        optimized = result.optimized_resume

        self.assertIn("k8s", optimized.summary)
        self.assertNotIn("Kubernetes", optimized.summary)
        bullets = optimized.all_bullets()
        self.assertTrue(any(contains_whole_word(bullet, "k8s") for bullet in bullets), bullets)
        for bullet in bullets:
            self.assertNotIn("Kubernetes", bullet)
            self.assertNotIn("PostgreSQL", bullet)
        added = [
            change.after
            for change in result.changes
            if change.section == "skills" and change.change_type == "added"
        ]
        self.assertIn("k8s", added)
        self.assertNotIn("Kubernetes", added)

    def test_contact_details_are_preserved(self):
        result = optimizer_service.optimize_resume(_resume(), JD_TEXT)
        self.assertEqual(result.optimized_resume.name, "Ana Silva")
        self.assertEqual(result.optimized_resume.email, "ana@example.com")
        self.assertEqual(result.optimized_resume.education, _resume().education)

    def test_malformed_oracle_output_is_merged_with_original(self):
        partial = ResumeDocument(summary="Rewritten summary " * 3, skills=[SkillCategory(category="Cloud", items=["AWS"])])
        oracle = Mock(
            side_effect=MalformedOracleOutput("missing experience", partial=partial, missing=("experience",))
        )
        result = optimizer_service.optimize_resume(_resume(), JD_TEXT, oracle=oracle)

        self.assertFalse(result.degraded)
        self.assertEqual(
            [entry.company for entry in result.optimized_resume.work_experience],
            ["Acme", "Globex"],
        )
        kwargs = oracle.call_args.kwargs
        self.assertEqual(kwargs["required"], ("skills", "experience"))
        self.assertEqual(kwargs["contact"]["name"], "Ana Silva")
        self.assertEqual(kwargs["target_role"], "Platform Engineer")

    def test_light_mode_skips_oracle_and_summary(self):
        oracle = Mock()
        result = optimizer_service.optimize_resume(_resume(), JD_TEXT, mode="light", oracle=oracle)

        oracle.assert_not_called()
        self.assertFalse(result.degraded)
        self.assertEqual(result.optimized_resume.summary, "Engineer who likes building things.")

    def test_aggressive_mode_restores_canonical_order(self):
        resume = _resume(section_order=["header", "experience", "education", "skills", "summary"])
        result = optimizer_service.optimize_resume(resume, JD_TEXT, mode="aggressive")

        self.assertEqual(result.optimized_resume.section_order, list(CANONICAL_SECTION_ORDER))
        self.assertTrue(result.compliance.section_order.is_valid)

    def test_oversized_input_is_rejected(self):
        small = replace(optimizer_service.settings, max_input_chars=100)
        with patch.object(optimizer_service, "settings", small):
            with self.assertRaises(InputTooLarge) as ctx:
                optimizer_service.optimize_resume(_resume(), JD_TEXT)
        self.assertEqual(ctx.exception.code, "input_too_large")
        self.assertEqual(ctx.exception.limit, 100)

    def test_extraction_penalty_applies_to_before_score(self):
        text = optimizer_service.optimize_resume(_resume(), JD_TEXT, extraction_mode="text")
        ocr = optimizer_service.optimize_resume(_resume(), JD_TEXT, extraction_mode="ocr")
        self.assertEqual(ocr.before_score.extraction_penalty, 10)
        self.assertEqual(ocr.after_score.extraction_penalty, 0)
        self.assertEqual(ocr.after_score.overall, text.after_score.overall)

    def test_unknown_mode_is_rejected(self):
        with self.assertRaises(ValueError):
            optimizer_service.optimize_resume(_resume(), JD_TEXT, mode="extreme")


if __name__ == "__main__":
    unittest.main()
