from __future__ import annotations

import re
from functools import lru_cache

_BULLET_CHARS = "•◦▪▫●○■□◆◇▶►-–—*·"
_BULLET_PATTERN = re.compile(rf"^\s*(?:[{re.escape(_BULLET_CHARS)}]|(?:\d+[\.\)]))\s+")
_WORD_CHARS = r"a-z0-9+#"

_METRIC_UNITS = (
    "users?",
    "customers?",
    "clients?",
    "projects?",
    "teams?",
    "people",
    "members?",
    "engineers?",
    "developers?",
    "stakeholders?",
    "hours?",
    "days?",
    "weeks?",
    "months?",
    "years?",
    "requests?",
    "transactions?",
    "records?",
    "services?",
    "features?",
    "releases?",
    "sprints?",
    "modules?",
    "endpoints?",
    "pages?",
    "reports?",
    "tests?",
    "queries",
    "query",
    "students?",
    "downloads?",
    "million",
    "billion",
)
_METRIC_RE = re.compile(
    r"\d+(?:\.\d+)?\s?%"
    r"|\$\s?\d"
    r"|\b\d+(?:\.\d+)?x\b"
    r"|\b\d[\d,.]*\s?(?:k|m)?\+?\s?(?:" + "|".join(_METRIC_UNITS) + r")\b",
    re.IGNORECASE,
)


def normalize_line(line: str) -> str:
    return re.sub(r"\s+", " ", line or "").strip()


def is_bullet_like(line: str) -> bool:
    return bool(_BULLET_PATTERN.match(line))


def strip_bullet_prefix(line: str) -> str:
    return _BULLET_PATTERN.sub("", line).strip()


def word_count(text: str) -> int:
    return len((text or "").split())


def has_metric(text: str) -> bool:
    """True when the text carries a percentage, a currency amount, or a number with a unit."""
    return bool(_METRIC_RE.search(text or ""))


def leading_word(text: str) -> str:
    stripped = strip_bullet_prefix(normalize_line(text))
    if not stripped:
        return ""
    return re.sub(r"[^\w-]", "", stripped.split(" ", 1)[0]).lower()


@lru_cache(maxsize=1024)
def whole_word_pattern(term: str) -> re.Pattern[str]:
    """Case-insensitive pattern matching term as a whole word, safe for 'c++', '.net', 'ci/cd'."""
    return re.compile(
        rf"(?<![{_WORD_CHARS}]){re.escape(term.lower())}(?![{_WORD_CHARS}])",
        re.IGNORECASE,
    )


def count_whole_word(text: str, term: str) -> int:
    if not term or not text:
        return 0
    return len(whole_word_pattern(term).findall(text))


def contains_whole_word(text: str, term: str) -> bool:
    if not term or not text:
        return False
    return whole_word_pattern(term).search(text) is not None
