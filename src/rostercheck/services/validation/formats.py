from __future__ import annotations

import json
import math
import re
from enum import Enum
from typing import Final, Optional
from urllib.parse import urlparse

from ...domain.table import cell_text, to_number
from ...utils.normalize import strip_quotes

_RANGE: Final = re.compile(r"^(\d+)\s*-\s*(\d+)$")
_COMMA_NUMBERS: Final = re.compile(r"^\d+(\s*,\s*\d+)*$")
_SINGLE: Final = re.compile(r"^\[?\d+\]?$")
_EMAIL: Final = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE: Final = re.compile(r"^\+?[\d\s\-\(\)]{10,}$")
_WHITESPACE: Final = re.compile(r"\s+")

# Ranges wider than this are kept as one literal token when expanded
MAX_RANGE_SPAN: Final = 10_000
# Digit runs longer than this are never converted to int
MAX_PHASE_DIGITS: Final = 18


class PhaseFormat(str, Enum):
    JSON_ARRAY = "json_array"
    RANGE = "range"
    COMMA_SEPARATED = "comma_separated"
    SINGLE_VALUE = "single_value"
    INVALID = "invalid"


def _is_bracketed(text: str) -> bool:
    return text.startswith("[") and text.endswith("]")


def small_int(digits: str) -> Optional[int]:
    """int() of a digit run, or None when it is too long to be a phase or ID number."""
    if len(digits.lstrip("0")) > MAX_PHASE_DIGITS:
        return None
    return int(digits)


def _digits_key(digits: str) -> tuple[int, str]:
    # orders digit runs numerically without converting them
    significant = digits.lstrip("0")
    return len(significant), significant


def _loads(text: str) -> tuple[bool, object]:
    try:
        return True, json.loads(text)
    except (ValueError, RecursionError):
        return False, None


def _json_number(item: object) -> bool:
    if isinstance(item, bool):
        return False
    if isinstance(item, int):
        return True
    if isinstance(item, float):
        return math.isfinite(item)
    return isinstance(item, str) and to_number(item) is not None


def detect_phase_format(text: str) -> PhaseFormat:
    s = text.strip()
    if _is_bracketed(s):
        ok, parsed = _loads(s)
        return PhaseFormat.JSON_ARRAY if ok and isinstance(parsed, list) else PhaseFormat.INVALID
    if _RANGE.match(s):
        return PhaseFormat.RANGE
    if _COMMA_NUMBERS.match(s):
        return PhaseFormat.COMMA_SEPARATED
    if _SINGLE.match(s):
        return PhaseFormat.SINGLE_VALUE
    return PhaseFormat.INVALID


def phase_error(text: str) -> Optional[str]:
    """None when the text is an accepted phase encoding, else the reason."""
    s = text.strip()
    if not s:
        return "empty value"
    if _is_bracketed(s):
        ok, parsed = _loads(s)
        if not ok:
            return "invalid JSON array format"
        if isinstance(parsed, list) and all(_json_number(x) for x in parsed):
            return None
        return "JSON array must contain only numbers"
    m = _RANGE.match(s)
    if m:
        if _digits_key(m.group(1)) <= _digits_key(m.group(2)):
            return None
        return "invalid range format (start must be <= end)"
    if _COMMA_NUMBERS.match(s) or _SINGLE.match(s):
        return None
    return "must be JSON array [1,2,3], range 1-3, or comma-separated 1,2,3"


def skills_error(text: str) -> Optional[str]:
    s = text.strip()
    if not s:
        return "empty value"
    if _is_bracketed(s):
        ok, parsed = _loads(s)
        if not ok:
            return "invalid JSON array format"
        if isinstance(parsed, list) and all(isinstance(x, str) for x in parsed):
            return None
        return "JSON array must contain only strings"
    for sep in (",", ";"):
        if sep in s:
            if all(part.strip() for part in s.split(sep)):
                return None
            return "separated skills cannot be empty"
    return None


def looks_like_json(text: str) -> bool:
    s = text.strip()
    return s.startswith("{") or s.startswith("[")


def json_parses(text: str) -> bool:
    ok, _ = _loads(text.strip())
    return ok


def is_valid_email(text: str) -> bool:
    return _EMAIL.match(text.strip()) is not None


def is_valid_phone(text: str) -> bool:
    return _PHONE.match(text.strip()) is not None


def is_valid_url(text: str) -> bool:
    try:
        parsed = urlparse(text.strip())
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc or parsed.path)


def _tokens(parts: list[str]) -> list[str]:
    out = []
    for p in parts:
        t = strip_quotes(p.strip()).strip()
        if t:
            out.append(t)
    return out


def parse_task_list(value: object) -> list[str]:
    """Split a requested-task cell: JSON array, comma, semicolon, space, or one token."""
    s = strip_quotes(cell_text(value).strip())
    if not s:
        return []
    if _is_bracketed(s):
        ok, parsed = _loads(s)
        if ok and isinstance(parsed, list):
            return _tokens([cell_text(x) for x in parsed])
        # array-like but not JSON, e.g. [T1, T2]
        return _tokens(s[1:-1].split(","))
    if "," in s:
        return _tokens(s.split(","))
    if ";" in s:
        return _tokens(s.split(";"))
    return _tokens(_WHITESPACE.split(s))


def parse_skills(value: object) -> list[str]:
    s = cell_text(value).strip()
    if not s:
        return []
    if _is_bracketed(s):
        ok, parsed = _loads(s)
        if ok and isinstance(parsed, list):
            return _tokens([cell_text(x) for x in parsed])
    for sep in (",", ";"):
        if sep in s:
            return _tokens(s.split(sep))
    return [s]


def parse_phases(value: object) -> list[str]:
    """Phase tokens with ranges expanded: '1-3' -> ['1', '2', '3']."""
    s = cell_text(value).strip()
    if not s:
        return []
    if _is_bracketed(s):
        ok, parsed = _loads(s)
        if ok and isinstance(parsed, list):
            return _tokens([cell_text(x) for x in parsed])
    m = _RANGE.match(s)
    if m:
        start, end = small_int(m.group(1)), small_int(m.group(2))
        if start is not None and end is not None and 0 <= end - start <= MAX_RANGE_SPAN:
            return [str(i) for i in range(start, end + 1)]
    if "," in s:
        return _tokens(s.split(","))
    if _is_bracketed(s):
        return _tokens([s[1:-1]])
    return [s]
