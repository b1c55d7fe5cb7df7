import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_optimizer.schemas.resume import SkillCategory  # noqa: E402
from ats_optimizer.taxonomy import aggregate_categories, aggregate_skills, validate_skill_category  # noqa: E402
from ats_optimizer.taxonomy.display import strip_version  # noqa: E402
from ats_optimizer.taxonomy.local_taxonomy import LocalTaxonomy  # noqa: E402


class TaxonomyTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.taxonomy = LocalTaxonomy()

    def test_version_suffixes_are_stripped(self):
        self.assertEqual(strip_version("Python 3.11"), "Python")
        self.assertEqual(strip_version("Node 20.x"), "Node")
        self.assertEqual(strip_version("Python (3.11)"), "Python")
        self.assertEqual(strip_version("React 18"), "React")
        self.assertEqual(strip_version("HTML5"), "HTML5")

    def test_aliases_resolve_to_one_canonical_form(self):
        self.assertEqual(self.taxonomy.canonicalize("ReactJS"), "react")
        self.assertEqual(self.taxonomy.canonicalize("Postgres"), "postgresql")
        self.assertEqual(self.taxonomy.canonicalize("golang"), "go")
        self.assertEqual(self.taxonomy.format_display_name("k8s"), "Kubernetes")
        self.assertEqual(self.taxonomy.format_display_name("nodejs"), "Node.js")

    def test_first_matching_rule_wins(self):
        self.assertEqual(self.taxonomy.classify("Kubernetes"), "Cloud & DevOps")
        self.assertEqual(self.taxonomy.classify("Python 3.11"), "Programming Languages")
        self.assertEqual(self.taxonomy.classify("React Native"), "Frontend Technologies")
        self.assertEqual(self.taxonomy.classify("Postgres"), "Databases")
        self.assertIsNone(self.taxonomy.classify("Underwater basket weaving"))

    def test_display_names_classify_like_raw_terms(self):
        for rule in self.taxonomy.config.rules:
            for term in rule.terms:
                with self.subTest(term=term):
                    self.assertEqual(
                        self.taxonomy.classify(self.taxonomy.format_display_name(term)),
                        self.taxonomy.classify(term),
                    )

    def test_language_rule_does_not_claim_longer_tokens(self):
        self.assertEqual(self.taxonomy.classify("Java"), "Programming Languages")
        self.assertNotEqual(self.taxonomy.classify("Spring Boot"), "Programming Languages")

    def test_aggregation_places_each_skill_once(self):
        result = aggregate_skills(
            self.taxonomy,
            ["Python", "python 3.11", "ReactJS", "React", "Docker", "Postgres", "Basket weaving"],
        )
        all_items = [item for category in result.categories for item in category.items]
        self.assertEqual(len(all_items), len(set(all_items)))
        self.assertIn("Python", all_items)
        self.assertIn("React", all_items)
        self.assertIn("PostgreSQL", all_items)
        self.assertEqual(result.dropped, ["Basket weaving"])
        self.assertEqual(result.duplicates, ["python 3.11", "React"])
        self.assertEqual(result.category_of("Docker"), "Cloud & DevOps")

    def test_categories_follow_display_order(self):
        result = aggregate_categories(
            self.taxonomy,
            [
                SkillCategory(category="Misc", items=["Docker", "Jest"]),
                SkillCategory(category="Languages", items=["TypeScript"]),
            ],
        )
        names = [category.category for category in result.categories]
        order = list(self.taxonomy.category_order())
        self.assertEqual(names, sorted(names, key=order.index))
        self.assertEqual(names[0], "Programming Languages")

    def test_validate_skill_category(self):
        self.assertTrue(validate_skill_category(self.taxonomy, "terraform", "Cloud & DevOps"))
        self.assertFalse(validate_skill_category(self.taxonomy, "terraform", "Databases"))


if __name__ == "__main__":
    unittest.main()
