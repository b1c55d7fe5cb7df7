from .ledger import VerbOverflow, VerbUsageLedger
from .pipeline import BulletProfile, RepairResult, describe_bullet, repair_entries, repair_resume
from .summary import generate_summary

__all__ = [
    "BulletProfile",
    "RepairResult",
    "VerbOverflow",
    "VerbUsageLedger",
    "describe_bullet",
    "generate_summary",
    "repair_entries",
    "repair_resume",
]
