"""
Heuristic extractor — typed values out of free-form agent answers.

The financial agent answers in natural language ("Current balance is
-$2,340.50, credit limit $10,000..."), so fields are recovered by pattern
matching anchored on a keyword. This is best-effort inference, not a parser:
every function returns an ``Extraction`` whose ``value`` is ``None`` when
nothing matched, and none of them raise.

Parsing is locale-naive: ``,`` is a thousands separator, ``.`` the decimal
point, and dates are only recognized as ``YYYY-MM-DD``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

logger = logging.getLogger("execbrief.analyzers.extraction")

# Keyword, up to 20 chars of filler, optional sign/currency, then the amount.
_NUMBER_TEMPLATE = r"(?:{keyword})[^0-9$-]{{0,20}}[-$]{{0,2}}[0-9,]+\.?[0-9]*"
_NUMBER_TAIL = re.compile(r"-?\$?[0-9,]+\.?[0-9]*")

# Sentence-bounded window after the keyword for boolean verdicts.
_FLAG_WINDOW_TEMPLATE = r"(?:{keyword})[^.]{{0,40}}"
_FLAG_NEARBY_TEMPLATE = r"(?:{keyword}).{{0,20}}\b(?:yes|true|enabled|active)\b"

AFFIRMATIVE_TERMS = re.compile(r"\b(?:yes|true|enabled|active|has auto|with auto)\b", re.IGNORECASE)
NEGATIVE_TERMS = re.compile(r"\b(?:no|false|disabled|inactive|no auto|without auto)\b", re.IGNORECASE)

_ISO_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


class FieldKind(str, Enum):
    """Type of value a field pattern yields."""

    NUMBER = "number"
    FLAG = "flag"
    DATE = "date"
    CHOICE = "choice"


@dataclass(frozen=True)
class Extraction:
    """Result of one extraction.

    ``span`` is the substring the value was read from, kept so a surprising
    value can be traced back to the answer text.
    """

    value: Any = None
    span: str | None = None

    @property
    def found(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class FieldPattern:
    """One row of a field table: which field, what type, anchored on what."""

    name: str
    kind: FieldKind
    pattern: str = ""


# ---------------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------------


def find_number(text: str | None, keyword: str) -> Extraction:
    """Find the first amount following ``keyword`` (a regex fragment)."""
    if not text:
        return Extraction()
    match = re.search(_NUMBER_TEMPLATE.format(keyword=keyword), text, re.IGNORECASE)
    if not match:
        return Extraction()

    span = match.group(0)
    tails = _NUMBER_TAIL.findall(span)
    if not tails:
        return Extraction(span=span)
    cleaned = tails[-1].replace("$", "").replace(",", "")
    try:
        return Extraction(value=float(cleaned), span=span)
    except ValueError:
        return Extraction(span=span)


def extract_number(text: str | None, keyword: str) -> float | None:
    """Amount following ``keyword``, or ``None`` when there is none.

    ``None`` means unknown, not zero.

    >>> extract_number("Current balance is -$2,340.50 today", "balance")
    -2340.5
    """
    return find_number(text, keyword).value


# ---------------------------------------------------------------------------
# Booleans
# ---------------------------------------------------------------------------


def find_flag(text: str | None, keyword: str) -> Extraction:
    """Tri-state verdict for ``keyword``: ``True``, ``False`` or unknown.

    Looks at the first window of up to 40 characters after the keyword
    (stopping at a period). Affirmative terms win over negative ones. With no
    verdict in the window, falls back to the keyword followed closely by an
    affirmative term anywhere in the text.
    """
    if not text:
        return Extraction()

    window = re.search(_FLAG_WINDOW_TEMPLATE.format(keyword=keyword), text, re.IGNORECASE)
    if window:
        snippet = window.group(0)
        if AFFIRMATIVE_TERMS.search(snippet):
            return Extraction(value=True, span=snippet)
        if NEGATIVE_TERMS.search(snippet):
            return Extraction(value=False, span=snippet)

    nearby = re.search(_FLAG_NEARBY_TEMPLATE.format(keyword=keyword), text, re.IGNORECASE)
    if nearby:
        return Extraction(value=True, span=nearby.group(0))

    return Extraction(span=window.group(0) if window else None)


def extract_bool(text: str | None, keyword: str) -> bool:
    """Two-state verdict for ``keyword``; silence reads as ``False``.

    This conflates "not mentioned" with "disabled". Prefer :func:`find_flag`
    where the difference matters.
    """
    return find_flag(text, keyword).value is True


# ---------------------------------------------------------------------------
# Dates and choices
# ---------------------------------------------------------------------------


def find_date(text: str | None) -> Extraction:
    """First ``YYYY-MM-DD`` in the text. Impossible dates yield no value."""
    if not text:
        return Extraction()
    match = _ISO_DATE.search(text)
    if not match:
        return Extraction()
    try:
        return Extraction(value=date.fromisoformat(match.group(0)), span=match.group(0))
    except ValueError:
        logger.debug("Ignoring impossible date %r", match.group(0))
        return Extraction(span=match.group(0))


def extract_date(text: str | None) -> date | None:
    return find_date(text).value


def find_choice(text: str | None, pattern: str) -> Extraction:
    """First match of ``pattern`` as a snake_case token (``credit.card`` → ``credit_card``)."""
    if not text:
        return Extraction()
    match = re.search(rf"\b(?:{pattern})\b", text, re.IGNORECASE)
    if not match:
        return Extraction()
    token = re.sub(r"[^a-z0-9]+", "_", match.group(0).lower()).strip("_")
    return Extraction(value=token, span=match.group(0))


# ---------------------------------------------------------------------------
# Field tables
# ---------------------------------------------------------------------------


def extract_field(text: str | None, spec: FieldPattern) -> Extraction:
    """Dispatch one field pattern to the extractor for its kind."""
    if spec.kind == FieldKind.NUMBER:
        return find_number(text, spec.pattern)
    if spec.kind == FieldKind.FLAG:
        return find_flag(text, spec.pattern)
    if spec.kind == FieldKind.DATE:
        return find_date(text)
    return find_choice(text, spec.pattern)


def extract_fields(text: str | None, specs: Iterable[FieldPattern]) -> dict[str, Extraction]:
    """Run every pattern in a field table over the same answer text."""
    return {spec.name: extract_field(text, spec) for spec in specs}
