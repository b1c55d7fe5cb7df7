import json
import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_optimizer.schemas.resume import ResumeDocument  # noqa: E402
from ats_optimizer.services import rewrite_oracle  # noqa: E402
from ats_optimizer.services.errors import MalformedOracleOutput, OracleUnavailable  # noqa: E402
from ats_optimizer.services.retry import RetryConfig  # noqa: E402

ENABLED_ENV = {"OPTIMIZER_LLM_ENABLED": "1", "OPENAI_API_KEY": "sk-test-key"}

PAYLOAD = {
    "name": "Model Name",
    "targetRole": "Platform Engineer",
    "summary": "Platform engineer focused on reliable infrastructure.",
    "workExperience": [
        {
            "role": "Engineer",
            "company": "Acme",
            "year": "2020 - 2024",
            "bullets": "- Built deploy tooling for 5 teams\n- Built deploy tooling for 5 teams\n• Led the cloud migration",
        }
    ],
    "projects": [
        {"title": "Infra", "techStack": "Terraform, AWS", "bullets": ["Automated provisioning for 3 teams"]}
    ],
    "skills": {"Cloud": "AWS; Terraform", "Languages": ["Python", "python"]},
}


class CommentSanitizerTests(unittest.TestCase):
    def test_urls_survive(self):
        self.assertEqual(
            rewrite_oracle.deep_clean_comments("Portfolio: https://ana.dev/work"),
            "Portfolio: https://ana.dev/work",
        )

    def test_comment_forms_are_removed(self):
        self.assertEqual(rewrite_oracle.deep_clean_comments("line one\n// remove me\nline two"), "line one\n\nline two")
        self.assertEqual(rewrite_oracle.deep_clean_comments("Shipped v2 // TODO tighten"), "Shipped v2")
        self.assertEqual(rewrite_oracle.deep_clean_comments({"a": ["x /* draft */"], "n": 3}), {"a": ["x"], "n": 3})


class CoercionTests(unittest.TestCase):
    def test_loose_payload_becomes_a_document(self):
        document = rewrite_oracle.coerce_resume_payload(
            PAYLOAD,
            contact={"name": "Ana Silva", "email": "ana@example.com"},
        )
        self.assertEqual(document.name, "Ana Silva")
        self.assertEqual(document.email, "ana@example.com")
        self.assertEqual(document.target_role, "Platform Engineer")
        self.assertEqual(
            document.work_experience[0].bullets,
            ["Built deploy tooling for 5 teams", "Led the cloud migration"],
        )
        self.assertEqual(document.projects[0].tech_stack, ["Terraform", "AWS"])
        self.assertEqual(
            [(category.category, category.items) for category in document.skills],
            [("Cloud", ["AWS", "Terraform"]), ("Languages", ["Python"])],
        )

    def test_missing_required_section_carries_partial(self):
        payload = {key: value for key, value in PAYLOAD.items() if key != "projects"}
        with self.assertRaises(MalformedOracleOutput) as ctx:
            rewrite_oracle.coerce_resume_payload(payload)
        self.assertEqual(ctx.exception.missing, ("projects",))
        self.assertEqual(ctx.exception.code, "oracle_malformed")
        self.assertTrue(ctx.exception.partial.skills)

    def test_sections_outside_required_may_be_empty(self):
        payload = {key: value for key, value in PAYLOAD.items() if key != "projects"}
        document = rewrite_oracle.coerce_resume_payload(payload, required=("skills", "experience"))
        self.assertEqual(document.projects, [])


class RewriteResumeTests(unittest.TestCase):
    def setUp(self):
        self.sleeps: list[float] = []

    def _rewrite(self):
        return rewrite_oracle.rewrite_resume(
            "resume text",
            "job text",
            user_type="experienced",
            retry_config=RetryConfig(max_attempts=3, base_delay=1.0),
            sleep=self.sleeps.append,
        )

    def test_disabled_oracle_is_unavailable(self):
        with patch.dict(os.environ, {"OPTIMIZER_LLM_ENABLED": "0"}):
            with self.assertRaises(OracleUnavailable) as ctx:
                self._rewrite()
        self.assertEqual(ctx.exception.code, "oracle_disabled")

    def test_placeholder_key_disables_oracle(self):
        with patch.dict(os.environ, {"OPTIMIZER_LLM_ENABLED": "1", "OPENAI_API_KEY": "your_openai_key"}):
            self.assertFalse(rewrite_oracle.oracle_enabled())

    def test_transient_failure_is_retried(self):
        with patch.dict(os.environ, ENABLED_ENV), patch.object(
            rewrite_oracle, "_request_rewrite", side_effect=[ConnectionError("reset"), json.dumps(PAYLOAD)]
        ) as request:
            document = self._rewrite()
        self.assertEqual(request.call_count, 2)
        self.assertEqual(self.sleeps, [1.0])
        self.assertEqual(document.projects[0].title, "Infra")

    def test_exhausted_retries_surface_as_unavailable(self):
        with patch.dict(os.environ, ENABLED_ENV), patch.object(
            rewrite_oracle, "_request_rewrite", side_effect=ConnectionError("down")
        ) as request:
            with self.assertRaises(OracleUnavailable) as ctx:
                self._rewrite()
        self.assertEqual(request.call_count, 3)
        self.assertEqual(self.sleeps, [1.0, 2.0])
        self.assertEqual(ctx.exception.code, "oracle_unavailable")

    def test_non_json_output_is_malformed(self):
        with patch.dict(os.environ, ENABLED_ENV), patch.object(
            rewrite_oracle, "_request_rewrite", return_value="Sure! Here is your resume."
        ):
            with self.assertRaises(MalformedOracleOutput) as ctx:
                self._rewrite()
        self.assertEqual(ctx.exception.partial, ResumeDocument())
        self.assertEqual(ctx.exception.missing, rewrite_oracle.REQUIRED_SECTIONS)


if __name__ == "__main__":
    unittest.main()
