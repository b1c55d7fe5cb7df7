import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_optimizer.features.keyword_extractor import (  # noqa: E402
    DEFAULT_JOB_TITLE,
    clean_skill_items,
    detect_seniority,
    extract_job_title,
    extract_skills_in_order,
    is_valid_tech_skill,
)


class KeywordExtractorTests(unittest.TestCase):
    def test_extracts_technologies_in_order_of_appearance(self):
        text = "We use React, Node.js and PostgreSQL with Docker. Kubernetes is a plus. React again."
        self.assertEqual(
            extract_skills_in_order(text),
            ["react", "node.js", "postgresql", "docker", "kubernetes"],
        )

    def test_methodology_and_ambiguous_words_are_not_extracted(self):
        self.assertEqual(extract_skills_in_order("Agile and Scrum ceremonies for a go-getter who can rest."), [])

    def test_blacklist_beats_whitelist(self):
        self.assertFalse(is_valid_tech_skill("oracle"))
        self.assertFalse(is_valid_tech_skill("Developer"))
        self.assertFalse(is_valid_tech_skill("Bangalore"))
        self.assertTrue(is_valid_tech_skill("Docker"))
        self.assertTrue(is_valid_tech_skill("socket.io"))
        self.assertTrue(is_valid_tech_skill("c"))

    def test_clean_skill_items_splits_kept_and_removed(self):
        kept, removed = clean_skill_items(["Python", "Team Player", "Bangalore", "C", "R", "the best stuff"])
        self.assertEqual(kept, ["Python", "C", "R"])
        self.assertEqual(removed, ["Team Player", "Bangalore", "the best stuff"])

    def test_job_title_from_first_line(self):
        self.assertEqual(
            extract_job_title("Senior Backend Engineer - Remote\nWe build payment systems."),
            "Senior Backend Engineer",
        )
        self.assertEqual(extract_job_title("Job Title: Data Analyst\nAbout us"), "Data Analyst")

    def test_job_title_from_prose_pattern(self):
        jd = "We are a fast-growing company. We are looking for a Python Developer to join us."
        self.assertEqual(extract_job_title(jd), "Python Developer")

    def test_job_title_default(self):
        self.assertEqual(extract_job_title(""), DEFAULT_JOB_TITLE)

    def test_seniority_detection(self):
        self.assertEqual(detect_seniority("Senior engineer with 5+ years"), "senior")
        self.assertEqual(detect_seniority("Entry-level role for new graduates"), "junior")
        self.assertEqual(detect_seniority("Summer internship program"), "intern")
        self.assertEqual(detect_seniority("We want a great teammate"), "mid")


if __name__ == "__main__":
    unittest.main()
