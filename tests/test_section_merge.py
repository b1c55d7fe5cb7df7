import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_optimizer.schemas.resume import ProjectEntry, ResumeDocument, SkillCategory  # noqa: E402
from ats_optimizer.services.section_merge import merge_sections  # noqa: E402


def _original() -> ResumeDocument:
    return ResumeDocument(
        name="Ana Silva",
        summary="Original summary",
        skills=[SkillCategory(category="Languages", items=["Python"])],
        projects=[ProjectEntry(title="Original", bullets=["Built a thing for 3 teams"])],
    )


class SectionMergeTests(unittest.TestCase):
    def test_most_recent_populated_value_wins(self):
        primary = ResumeDocument(summary="Rewritten summary", projects=[])
        secondary = ResumeDocument(projects=[ProjectEntry(title="From oracle", bullets=["Shipped 2 releases"])])
        merged = merge_sections(primary, secondary, _original())
        self.assertEqual(merged.summary, "Rewritten summary")
        self.assertEqual(merged.projects[0].title, "From oracle")
        self.assertEqual(merged.skills, _original().skills)
        self.assertEqual(merged.name, "Ana Silva")

    def test_blank_strings_never_replace_populated_fields(self):
        merged = merge_sections(ResumeDocument(summary="   ", name=""), None, _original())
        self.assertEqual(merged.summary, "Original summary")
        self.assertEqual(merged.name, "Ana Silva")

    def test_no_candidates_returns_original_copy(self):
        original = _original()
        merged = merge_sections(None, None, original)
        self.assertEqual(merged, original)
        merged.projects[0].bullets.append("Extra bullet")
        self.assertEqual(original.projects[0].bullets, ["Built a thing for 3 teams"])


if __name__ == "__main__":
    unittest.main()
