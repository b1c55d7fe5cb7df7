from __future__ import annotations

import re
from collections.abc import Mapping

_TRAILING_VERSION_RE = re.compile(r"\s+v?\d+(\.\d+)?(\.\d+)?\.?x?\s*$", re.IGNORECASE)
_PAREN_VERSION_RE = re.compile(r"\s*\([^)]*\d+[^)]*\)")
_FUSED_VERSION_RE = re.compile(r"^[A-Z]{2,}\d+$", re.IGNORECASE)
_TRAILING_NUMBER_RE = re.compile(r"\s+\d+$")


def strip_version(raw: str) -> str:
    """Drop version annotations: 'Python 3.11', 'Node 20.x', 'Python (3.11)', 'React 18'.

    Fused tokens such as 'HTML5' or 'ES6' are kept intact.
    """
    cleaned = (raw or "").strip()
    cleaned = _TRAILING_VERSION_RE.sub("", cleaned)
    cleaned = _PAREN_VERSION_RE.sub("", cleaned)
    if not _FUSED_VERSION_RE.match(cleaned):
        cleaned = _TRAILING_NUMBER_RE.sub("", cleaned)
    return cleaned.strip()


def canonical_form(raw: str, normalizations: Mapping[str, str]) -> str:
    lowered = strip_version(raw).lower()
    lowered = re.sub(r"\s+", " ", lowered)
    return normalizations.get(lowered, lowered)


def title_case_words(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split(" "))


def format_display_name(
    raw: str,
    *,
    normalizations: Mapping[str, str],
    display_names: Mapping[str, str],
) -> str:
    canonical = canonical_form(raw, normalizations)
    if not canonical:
        return ""
    if canonical in display_names:
        return display_names[canonical]
    return title_case_words(canonical)
