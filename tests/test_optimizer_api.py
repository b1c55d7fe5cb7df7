import os
import unittest

# Keep API tests deterministic and offline by default.
os.environ.setdefault("OPTIMIZER_LLM_ENABLED", "0")

from fastapi.testclient import TestClient

from ats_optimizer.main import app


class OptimizerApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        os.environ["OPTIMIZER_LLM_ENABLED"] = "0"
        cls.client = TestClient(app)
        cls.resume = {
            "name": "Ana Silva",
            "email": "ana@example.com",
            "summary": "Engineer who likes building things.",
            "skills": [{"category": "Languages", "items": ["Python", "Team Player"]}],
            "work_experience": [
                {
                    "role": "Software Engineer",
                    "company": "Acme",
                    "year": "2021 - 2024",
                    "bullets": ["Worked on deployment scripts", "Helped with on-call rotations"],
                }
            ],
        }
        cls.job_description = (
            "Platform Engineer\n"
            "We are hiring a platform engineer to run Kubernetes and Terraform on AWS.\n"
            "\n"
            "Requirements:\n"
            "- Kubernetes\n"
            "- Python\n"
        )

    def test_health(self):
        response = self.client.get("/v1/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "healthy"})

    def test_optimize_contract_shape(self):
        response = self.client.post(
            "/v1/optimize",
            json={"resume": self.resume, "job_description": self.job_description},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()

        self.assertTrue(body["degraded"])
        self.assertEqual(body["mode"], "standard")
        self.assertGreater(body["after_score"]["overall"], body["before_score"]["overall"])
        self.assertIn("Kubernetes", [item for category in body["optimized_resume"]["skills"] for item in category["items"]])
        self.assertIsInstance(body["changes"], list)
        self.assertIn("recommendations", body["compliance"])

    def test_oversized_input_returns_413(self):
        resume = dict(self.resume, summary="word " * 12000)
        response = self.client.post(
            "/v1/optimize",
            json={"resume": resume, "job_description": self.job_description},
        )
        self.assertEqual(response.status_code, 413)
        self.assertIn("exceeds limit", response.json()["detail"])

    def test_empty_job_description_is_rejected(self):
        response = self.client.post("/v1/optimize", json={"resume": self.resume, "job_description": ""})
        self.assertEqual(response.status_code, 422)

    def test_gaps_endpoint(self):
        response = self.client.post(
            "/v1/gaps",
            json={"resume": self.resume, "job_description": self.job_description},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["job_title"], "Platform Engineer")
        missing = [record["keyword"] for record in body["missing"]]
        self.assertIn("Kubernetes", missing)
        self.assertNotIn("Python", missing)

    def test_compliance_endpoint_derives_keywords(self):
        response = self.client.post(
            "/v1/compliance",
            json={"resume": self.resume, "job_description": self.job_description},
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertGreaterEqual(body["overall_score"], 0)
        self.assertLessEqual(body["overall_score"], 100)
        keywords = [record["keyword"] for record in body["keyword_frequency"]]
        self.assertIn("Kubernetes", keywords)

    def test_skill_classification(self):
        response = self.client.post("/v1/skills/classify", json={"skills": ["k8s", "ReactJS", "Basket weaving"]})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["skills"][0]["display"], "Kubernetes")
        self.assertEqual(body["skills"][0]["category"], "Cloud & DevOps")
        self.assertEqual(body["skills"][1]["normalized"], "react")
        self.assertIsNone(body["skills"][2]["category"])
        self.assertEqual(body["dropped"], ["Basket weaving"])


if __name__ == "__main__":
    unittest.main()
