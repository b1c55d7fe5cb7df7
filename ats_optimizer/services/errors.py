from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ats_optimizer.schemas.resume import ResumeDocument


class OptimizerError(RuntimeError):
    def __init__(self, message: str, *, code: str = "optimizer_error"):
        super().__init__(message)
        self.code = code


class OracleUnavailable(OptimizerError):
    def __init__(self, message: str, *, code: str = "oracle_unavailable"):
        super().__init__(message, code=code)


class MalformedOracleOutput(OptimizerError):
    """The oracle answered, but a required section is missing or empty."""

    def __init__(self, message: str, *, partial: ResumeDocument, missing: tuple[str, ...]):
        super().__init__(message, code="oracle_malformed")
        self.partial = partial
        self.missing = missing


class InputTooLarge(OptimizerError):
    def __init__(self, size: int, limit: int):
        super().__init__(
            f"Combined resume and job description length {size} exceeds limit {limit}.",
            code="input_too_large",
        )
        self.size = size
        self.limit = limit
