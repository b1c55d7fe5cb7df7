from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_optimizer.schemas.resume import ResumeDocument  # noqa: E402
from ats_optimizer.services.errors import InputTooLarge  # noqa: E402
from ats_optimizer.services.optimizer_service import optimize_resume  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Optimize a structured resume against a job description.")
    parser.add_argument("--resume", required=True, help="Path to the resume JSON document")
    parser.add_argument("--jd", required=True, help="Path to the job description text file")
    parser.add_argument("--mode", default="standard", choices=["light", "standard", "aggressive"])
    parser.add_argument("--target-role", default=None, help="Override the role the resume targets")
    parser.add_argument(
        "--extraction-mode",
        default="text",
        choices=["text", "hybrid", "ocr"],
        help="How the resume text was obtained (affects the before score only)",
    )
    parser.add_argument("--out", default="", help="Output JSON path (stdout when omitted)")
    args = parser.parse_args()

    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    resume = ResumeDocument.model_validate_json(Path(args.resume).read_text(encoding="utf-8"))
    jd_text = Path(args.jd).read_text(encoding="utf-8")

    try:
        result = optimize_resume(
            resume,
            jd_text,
            target_role=args.target_role,
            mode=args.mode,
            extraction_mode=args.extraction_mode,
        )
    except InputTooLarge as exc:
        raise SystemExit(str(exc)) from exc

    payload = result.model_dump_json(indent=2)
    if not args.out:
        print(payload)
        return

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(payload + "\n", encoding="utf-8")
    print(
        f"Wrote {out_path} (score {result.before_score.overall} -> {result.after_score.overall}, "
        f"{len(result.changes)} changes)"
    )


if __name__ == "__main__":
    main()
