"""Canonical class identity.

Every field is normalized on its own and never raises: values in a
recognised format are rewritten to the canonical one, anything else is
passed through trimmed. Only `parse_key` is strict.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional, Union

from ..core.constants import DEFAULT_COHORT_SPAN_YEARS, DEFAULT_SECTION
from ..core.exceptions import InvalidClassKey
from .model import ClassKey

COHORT_PATTERN = re.compile(r"\d{4}-\d{4}")
YEAR_PATTERN = re.compile(r"\d+(st|nd|rd|th) Year")
TERM_PATTERN = re.compile(r"Sem \d+")
SECTION_PATTERN = re.compile(r"[A-Z]")

_COHORT_SPAN = re.compile(r"(\d{4})\s*[-_/]\s*(\d{4})")
_COHORT_START = re.compile(r"\d{4}")
_YEAR_ORDINAL = re.compile(r"(\d+)\s*(st|nd|rd|th)(?:\s*year)?", re.IGNORECASE)
_YEAR_PREFIXED = re.compile(r"year\s*(\d+)", re.IGNORECASE)
_TERM_PREFIXED = re.compile(r"sem(?:ester)?\s*(\d+)", re.IGNORECASE)
_DIGITS = re.compile(r"\d+")

Components = Union[ClassKey, Mapping[str, Any]]

# Older records use batch/semester for cohort/term.
_ALIASES = {"cohort": ("cohort", "batch"), "year": ("year",), "term": ("term", "semester"), "section": ("section",)}


def ordinal(num: int) -> str:
    if num % 10 == 1 and num % 100 != 11:
        return f"{num}st"
    if num % 10 == 2 and num % 100 != 12:
        return f"{num}nd"
    if num % 10 == 3 and num % 100 != 13:
        return f"{num}rd"
    return f"{num}th"


def _text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    return str(value).strip()


def normalize_cohort(value: Any, *, span_years: int = DEFAULT_COHORT_SPAN_YEARS) -> str:
    raw = _text(value)
    m = _COHORT_SPAN.fullmatch(raw)
    if m:
        return f"{m.group(1)}-{m.group(2)}"
    if _COHORT_START.fullmatch(raw):
        start = int(raw)
        return f"{start}-{start + span_years}"
    return raw


def normalize_year(value: Any) -> str:
    raw = _text(value)
    if not raw:
        return ""
    for pattern in (_YEAR_ORDINAL, _YEAR_PREFIXED, _DIGITS):
        m = pattern.fullmatch(raw)
        if m:
            return f"{ordinal(int(m.group(1) if m.lastindex else m.group(0)))} Year"
    return re.sub(r"\s+", " ", raw)


def normalize_term(value: Any) -> str:
    raw = _text(value)
    if not raw:
        return ""
    m = _TERM_PREFIXED.fullmatch(raw)
    if m:
        return f"Sem {int(m.group(1))}"
    if _DIGITS.fullmatch(raw):
        return f"Sem {int(raw)}"
    return raw


def normalize_section(value: Any) -> str:
    raw = _text(value).upper()
    if raw and raw[0].isascii() and raw[0].isalpha():
        return raw[0]
    return DEFAULT_SECTION


def _pick(components: Mapping[str, Any], field: str) -> Any:
    for name in _ALIASES[field]:
        if components.get(name) not in (None, ""):
            return components[name]
    return None


def normalize(components: Components) -> ClassKey:
    if isinstance(components, ClassKey):
        components = components.as_dict()
    return ClassKey(
        cohort=normalize_cohort(_pick(components, "cohort")),
        year=normalize_year(_pick(components, "year")),
        term=normalize_term(_pick(components, "term")),
        section=normalize_section(_pick(components, "section")),
    )


def to_key(components: Components) -> str:
    return normalize(components).key


def is_canonical(class_key: ClassKey) -> bool:
    return bool(
        COHORT_PATTERN.fullmatch(class_key.cohort)
        and YEAR_PATTERN.fullmatch(class_key.year)
        and TERM_PATTERN.fullmatch(class_key.term)
        and SECTION_PATTERN.fullmatch(class_key.section)
    )


def parse_key(key: Optional[str]) -> Optional[ClassKey]:
    """Split a canonical key back into components; None when it is not one."""
    if not key or not isinstance(key, str):
        return None
    parts = key.split("_")
    if len(parts) != 4:
        return None
    candidate = ClassKey(*parts)
    return candidate if is_canonical(candidate) else None


def require_key(key: Optional[str]) -> ClassKey:
    parsed = parse_key(key)
    if parsed is None:
        raise InvalidClassKey(f"Invalid class key: {key!r}")
    return parsed


def coerce_class_key(value: Union[str, Components]) -> ClassKey:
    """Accept a key string or raw components; return canonical components."""
    if isinstance(value, str):
        return require_key(value)
    class_key = normalize(value)
    if not is_canonical(class_key):
        raise InvalidClassKey(f"Incomplete class identity: {class_key.key!r}")
    return class_key


def year_number(year: Any) -> Optional[int]:
    m = re.match(r"\d+", normalize_year(year))
    return int(m.group(0)) if m else None


def term_number(term: Any) -> Optional[int]:
    m = re.search(r"\d+", normalize_term(term))
    return int(m.group(0)) if m else None


def is_valid_year_term(year: Any, term: Any) -> bool:
    """Year N covers terms 2N-1 and 2N."""
    y, t = year_number(year), term_number(term)
    if y is None or t is None:
        return False
    return t in (2 * y - 1, 2 * y)
