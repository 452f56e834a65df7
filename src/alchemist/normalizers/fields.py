# src/alchemist/normalizers/fields.py
"""
@brief
Pure parsers for semi-structured dataset cells.

@details
Every parser takes one raw cell (string, number, None or an already
structured value) and returns a ParseResult. Parsers never raise on bad
cell content; the failure reason travels in the result so the validators
can turn it into a reported issue.

Phase cells (PreferredPhases, AvailableSlots) share a single grammar with
three recognised surface forms:
    - ARRAY  "[1, 3, 5]"  JSON array of non-negative integers
    - RANGE  "1-3"        inclusive integer range, start <= end
    - LIST   "2,4,5"      comma-separated non-negative integers
All three feed one canonicalisation step (ascending, distinct), so equal
phase sets always compare equal regardless of the syntax used.
"""

from __future__ import annotations

import json
import math
import numbers
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

_INT_RE = re.compile(r"^[+-]?\d+$")
_INTEGRAL_FLOAT_RE = re.compile(r"^[+-]?\d+\.0*$")
_RANGE_RE = re.compile(r"^(\d+)\s*-\s*(\d+)$")
_LIST_CHARS_RE = re.compile(r"^[\d\s,]+$")
_DIGITS_RE = re.compile(r"^\d+$")


@dataclass(frozen=True, slots=True)
class ParseResult:
    """
    Outcome of parsing one cell.

    Fields:
        ok: True when the cell matched its grammar.
        value: Normalized value (None on failure).
        reason: Human-readable failure reason (None on success).
    """

    ok: bool
    value: Any = None
    reason: str | None = None

    @classmethod
    def success(cls, value: Any) -> ParseResult:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: str) -> ParseResult:
        return cls(ok=False, reason=reason)


class PhaseSyntax(str, Enum):
    ARRAY = "array"
    RANGE = "range"
    LIST = "list"


# ------------------------------
# Scalars
# ------------------------------
def is_blank(value: Any) -> bool:
    """None, empty or whitespace-only strings, and NaN (spreadsheet gaps)."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, float):
        return math.isnan(value)
    return False


def as_text(value: Any) -> str:
    """
    @brief
    Render a cell as trimmed text.

    @details
    Integral floats lose their ".0" so that numeric keys read from
    spreadsheets ("1.0") compare equal to their text form ("1").
    Blank cells render as the empty string.
    """
    if is_blank(value):
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return json.dumps(list(value))
    return str(value).strip()


def clip_text(text: str, limit: int = 60) -> str:
    """Shorten text for messages; long cells end in "..."."""
    return text if len(text) <= limit else text[: limit - 3] + "..."


def parse_int(raw: Any, minimum: int | None = None, maximum: int | None = None) -> ParseResult:
    """
    @brief
    Parse an integer cell and check it against optional inclusive bounds.

    @details
    Accepts ints, integral floats (3.0) and strings holding an optionally
    signed integer ("4", " +2 ", "3.0"). Booleans, fractional values,
    blanks and numbers too long to convert are failures.

    @params
        raw : Any
            Cell value.
        minimum : int | None
            Inclusive lower bound, unchecked when None.
        maximum : int | None
            Inclusive upper bound, unchecked when None.

    @returns
        ParseResult holding the int on success.
    """
    if isinstance(raw, bool):
        return ParseResult.failure(f"expected an integer, got {str(raw).lower()}")
    if is_blank(raw):
        return ParseResult.failure("value is missing")

    value: int
    if isinstance(raw, numbers.Integral):
        value = int(raw)
    elif isinstance(raw, float):
        if not raw.is_integer():
            return ParseResult.failure(f"expected an integer, got {raw}")
        value = int(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not (_INT_RE.match(text) or _INTEGRAL_FLOAT_RE.match(text)):
            return ParseResult.failure(f"expected an integer, got '{clip_text(text)}'")
        try:
            value = int(text) if _INT_RE.match(text) else int(float(text))
        except (ValueError, OverflowError):
            # digit limit, or a float literal beyond the double range
            return ParseResult.failure(f"integer of {len(text)} characters is out of range")
    else:
        return ParseResult.failure(f"expected an integer, got {type(raw).__name__}")

    if minimum is not None and value < minimum:
        return ParseResult.failure(f"{clip_text(str(value))} is below the minimum of {minimum}")
    if maximum is not None and value > maximum:
        return ParseResult.failure(f"{clip_text(str(value))} is above the maximum of {maximum}")
    return ParseResult.success(value)


# ------------------------------
# Delimited lists
# ------------------------------
def split_list(raw: Any) -> ParseResult:
    """Comma-split a cell into trimmed tokens, empty tokens dropped, order and repeats kept."""
    if isinstance(raw, (list, tuple)):
        return ParseResult.success(tuple(t for t in (as_text(item) for item in raw) if t))
    text = as_text(raw)
    if not text:
        return ParseResult.success(())
    return ParseResult.success(tuple(tok.strip() for tok in text.split(",") if tok.strip()))


def split_set(raw: Any) -> ParseResult:
    """Like split_list, but repeated tokens collapse to their first occurrence."""
    tokens = split_list(raw).value
    return ParseResult.success(tuple(dict.fromkeys(tokens)))


# ------------------------------
# Phase grammar
# ------------------------------
def detect_phase_syntax(raw: Any) -> PhaseSyntax | None:
    """Recognise which of the three phase surface forms a cell uses (None = none of them)."""
    text = as_text(raw)
    if not text:
        return None
    if text.startswith("[") and text.endswith("]"):
        return PhaseSyntax.ARRAY
    if "-" in text:
        return PhaseSyntax.RANGE
    if _LIST_CHARS_RE.match(text):
        return PhaseSyntax.LIST
    return None


def _check_phase_limit(value: int, max_phase: int | None) -> None:
    if max_phase is not None and value > max_phase:
        raise ValueError(f"phase {clip_text(str(value))} is above the highest phase {max_phase}")


def _read_array(text: str, max_phase: int | None) -> list[int]:
    try:
        items = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"not a valid JSON array ({e.msg})") from e
    except RecursionError as e:
        raise ValueError("JSON array is nested too deeply") from e
    if not isinstance(items, list):
        raise ValueError("not a JSON array")
    for item in items:
        if isinstance(item, bool) or not isinstance(item, int):
            shown = type(item).__name__ if isinstance(item, (list, dict)) else json.dumps(item)
            raise ValueError(f"entry {clip_text(shown)} is not an integer")
        if item < 0:
            raise ValueError(f"entry {clip_text(str(item))} is negative")
        _check_phase_limit(item, max_phase)
    return items


def _read_range(text: str, max_phase: int | None) -> list[int]:
    match = _RANGE_RE.match(text)
    if match is None:
        raise ValueError("use 'start-end' with non-negative integers")
    start, end = int(match.group(1)), int(match.group(2))
    if start > end:
        raise ValueError(
            f"start {clip_text(str(start))} is greater than end {clip_text(str(end))}"
        )
    # bounded before expansion
    _check_phase_limit(end, max_phase)
    return list(range(start, end + 1))


def _read_list(text: str, max_phase: int | None) -> list[int]:
    values: list[int] = []
    for pos, token in enumerate(text.split(","), start=1):
        token = token.strip()
        if not token:
            raise ValueError(f"entry {pos} is empty")
        if not _DIGITS_RE.match(token):
            raise ValueError(f"entry '{clip_text(token)}' is not a non-negative integer")
        value = int(token)
        _check_phase_limit(value, max_phase)
        values.append(value)
    return values


_PHASE_READERS: dict[PhaseSyntax, Callable[[str, int | None], list[int]]] = {
    PhaseSyntax.ARRAY: _read_array,
    PhaseSyntax.RANGE: _read_range,
    PhaseSyntax.LIST: _read_list,
}


def canonical_phases(values: Iterable[int]) -> tuple[int, ...]:
    """Single canonical form for every phase syntax: ascending, distinct."""
    return tuple(sorted(set(values)))


def parse_phases(raw: Any, max_phase: int | None = None) -> ParseResult:
    """
    @brief
    Parse a phase cell in any of the three supported syntaxes.

    @details
    Blank cells are an empty phase set, not an error. A cell that matches
    none of the surface forms, or matches one but breaks its rules
    ("1,,3", "x-y", "3-1", "[1,\"a\"]"), is a failure. So is a phase above
    max_phase; ranges are checked before they are expanded.

    @returns
        ParseResult holding a tuple of distinct ascending phase numbers.
    """
    text = as_text(raw)
    if not text:
        return ParseResult.success(())

    syntax = detect_phase_syntax(text)
    if syntax is None:
        return ParseResult.failure(
            f"'{clip_text(text)}' is not a phase list; use '[1,2,3]', '1-3' or '1,2,3'"
        )

    try:
        values = _PHASE_READERS[syntax](text, max_phase)
    except ValueError as e:
        return ParseResult.failure(f"malformed phase {syntax.value} '{clip_text(text)}': {e}")
    return ParseResult.success(canonical_phases(values))


# ------------------------------
# JSON blobs
# ------------------------------
def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON value")


def parse_json_attributes(raw: Any) -> ParseResult:
    """Blank means no attributes; anything else must be a strict JSON document (no NaN/Infinity)."""
    if isinstance(raw, (dict, list)):
        return ParseResult.success(raw)
    if is_blank(raw):
        return ParseResult.success(None)
    text = raw if isinstance(raw, str) else str(raw)
    try:
        return ParseResult.success(json.loads(text, parse_constant=_reject_constant))
    except json.JSONDecodeError as e:
        return ParseResult.failure(f"{e.msg} at position {e.pos}")
    except ValueError as e:
        # oversized numbers and rejected constants
        return ParseResult.failure(str(e))
    except RecursionError:
        return ParseResult.failure("document is nested too deeply")


__all__ = [
    "ParseResult",
    "PhaseSyntax",
    "as_text",
    "canonical_phases",
    "clip_text",
    "detect_phase_syntax",
    "is_blank",
    "parse_int",
    "parse_json_attributes",
    "parse_phases",
    "split_list",
    "split_set",
]
