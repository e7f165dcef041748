"""Reference range classification for lab parameter results.

Classifies a measured value against the free-text reference range stored on
its parameter. Reference ranges are typed by lab staff and come in a handful
of shapes:

    "10,5 - 20,0"                  interval, bounds inclusive, either order
    "< 10" / "> 40"                strict comparison
    "<= 10" / "≥ 40"               inclusive comparison
    "Négatif"                      textual expected value
    "NEGATIF: < 1; POSITIF: > 1"   labelled negative/positive cut-offs

Anything else (bare numbers, sex or age qualified ranges, multi-line ranges)
is not judged. Classification never raises: a report must render even when
historical data is malformed, so every parse failure degrades to
INDETERMINATE.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from collections.abc import Iterable

from labreport.schemas.results import Classification, ExceptionEntry

logger = logging.getLogger(__name__)

IN_RANGE = Classification.IN_RANGE
OUT_OF_RANGE = Classification.OUT_OF_RANGE
INDETERMINATE = Classification.INDETERMINATE

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

# Leading number, after decimal comma normalisation ("12.5 g/L" -> 12.5)
_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

# Comparison operator at the start of a range; two-char forms first
_COMPARATOR = re.compile(r"^(<=|>=|≤|≥|<|>)\s*(.*)$", re.DOTALL)

# "< 12 ans ...", ">= 18 a", "<2y": ranges conditioned on age
_AGE_CONDITION = re.compile(r"^(?:<=|>=|<|>)\s*\d+\s*(?:ans?|y|a)\b", re.IGNORECASE)

# "Label: anything"
_LABELLED = re.compile(r"^([^\W\d_][^:]*?):\s*(.*)$", re.DOTALL)

_OPERATOR_CHARS = frozenset("<>≤≥")

_NEGATIVE_LABEL = "negatif"
_POSITIVE_LABEL = "positif"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_number(text: str | None) -> float | None:
    """Parse the leading number of a string, accepting a decimal comma.

    Mirrors how lab staff write values: "10,5", "12.0 g/dL" and "+3" all
    parse; "Négatif", "-" and "" do not.

    Returns:
        The parsed float, or None if the string does not start with a number.
    """
    if text is None:
        return None
    match = _LEADING_NUMBER.match(text.strip().replace(",", "."))
    if match is None:
        return None
    try:
        return float(match.group(0))
    except ValueError:
        return None


def _fold(text: str) -> str:
    """Case-fold and strip accents, for label comparison."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).strip().casefold()


def _exception_names(exceptions: Iterable[str | ExceptionEntry] | None) -> frozenset[str]:
    if not exceptions:
        return frozenset()
    if isinstance(exceptions, (str, ExceptionEntry)):
        # A single name, not a collection of one-character names
        exceptions = [exceptions]
    names = set()
    for entry in exceptions:
        name = entry.value if isinstance(entry, ExceptionEntry) else entry
        if name:
            names.add(name)
    return frozenset(names)


def is_skipped(
    category_name: str | None,
    test_type_name: str | None,
    exceptions: Iterable[str | ExceptionEntry] | None,
) -> bool:
    """Return True if range checking is disabled for this category or test type.

    Matching is exact and case-sensitive, against either name, whatever kind
    the exception entry declares.
    """
    names = _exception_names(exceptions)
    return bool(
        (category_name and category_name in names)
        or (test_type_name and test_type_name in names)
    )


def _is_unjudgeable(range_spec: str) -> bool:
    """Range shapes that are deliberately never judged automatically."""
    if "\n" in range_spec:
        return True
    if "Homme" in range_spec or "HOMME" in range_spec:
        return True
    return _AGE_CONDITION.match(range_spec) is not None


def _is_labelled_negative_positive(range_spec: str) -> bool:
    folded = _fold(range_spec)
    return (
        f"{_NEGATIVE_LABEL}:" in folded
        and f"{_POSITIVE_LABEL}:" in folded
        and ";" in folded
    )


def _starts_textual(range_spec: str) -> bool:
    first = range_spec[0]
    return parse_number(first) is None and first not in _OPERATOR_CHARS


# ---------------------------------------------------------------------------
# Numeric comparison
# ---------------------------------------------------------------------------


def compare_numeric(value: float, range_spec: str) -> Classification:
    """Compare a numeric value against a single numeric range expression.

    Boundary semantics:
      "< X"   -> value < X
      "> X"   -> value > X
      "<= X"  -> value <= X   (also "≤")
      ">= X"  -> value >= X   (also "≥")
      "A - B" -> min(A, B) <= value <= max(A, B)

    A bare number, or any bound that does not parse, is INDETERMINATE.

    Args:
        value: Parsed observation value.
        range_spec: Reference range text (one expression).

    Returns:
        Classification of value against the range.
    """
    cleaned = range_spec.strip()
    if not cleaned:
        return INDETERMINATE

    comparator = _COMPARATOR.match(cleaned)
    if comparator:
        operator, rest = comparator.groups()
        limit = parse_number(rest)
        if limit is None:
            return INDETERMINATE
        if operator == "<":
            in_range = value < limit
        elif operator == ">":
            in_range = value > limit
        elif operator in ("<=", "≤"):
            in_range = value <= limit
        else:
            in_range = value >= limit
        return IN_RANGE if in_range else OUT_OF_RANGE

    if "-" in cleaned:
        parts = cleaned.split("-")
        if len(parts) != 2:
            return INDETERMINATE
        low, high = parse_number(parts[0]), parse_number(parts[1])
        if low is None or high is None:
            return INDETERMINATE
        lower, upper = min(low, high), max(low, high)
        return IN_RANGE if lower <= value <= upper else OUT_OF_RANGE

    # Bare number or unrecognized syntax
    return INDETERMINATE


def _classify_labelled(value: str, range_spec: str) -> Classification:
    """Classify against "NEGATIF: <range>; POSITIF: <range>"."""
    segments: dict[str, str] = {}
    for part in range_spec.split(";"):
        part = part.strip()
        if not part:
            continue
        match = _LABELLED.match(part)
        if match is None:
            return INDETERMINATE
        segments[_fold(match.group(1))] = match.group(2).strip()

    negative = segments.get(_NEGATIVE_LABEL)
    positive = segments.get(_POSITIVE_LABEL)
    if not negative or not positive:
        logger.debug("Incomplete NEGATIF/POSITIF range: %r", range_spec)
        return INDETERMINATE

    folded_value = _fold(value)
    if folded_value == _NEGATIVE_LABEL:
        return IN_RANGE
    if folded_value == _POSITIVE_LABEL:
        return OUT_OF_RANGE

    number = parse_number(value)
    if number is None:
        return INDETERMINATE
    if compare_numeric(number, negative) is IN_RANGE:
        return IN_RANGE
    if compare_numeric(number, positive) is IN_RANGE:
        return OUT_OF_RANGE
    return INDETERMINATE


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def classify(
    value: str | None,
    range_spec: str | None,
    category_name: str | None = None,
    test_type_name: str | None = None,
    exceptions: Iterable[str | ExceptionEntry] | None = None,
) -> Classification:
    """Classify a result value against its reference range.

    Rules, in order:
      1. Missing value or range -> INDETERMINATE.
      2. Category or test type listed in exceptions -> INDETERMINATE.
      3. Value parsed as a number (decimal comma accepted).
      4. Non-numeric value: a textual range matching the value
         case-insensitively is IN_RANGE; anything else is INDETERMINATE.
      5. Numeric value: see compare_numeric(). A range starting with text
         cannot be compared to a number -> INDETERMINATE.

    Args:
        value: Result value as entered, e.g. "10,5" or "Négatif".
        range_spec: Parameter reference range text.
        category_name: Name of the parameter's category.
        test_type_name: Name of the parameter's test type.
        exceptions: Names (or ExceptionEntry records) for which range
            checking is disabled.

    Returns:
        The automatic classification.
    """
    if value is None or range_spec is None:
        return INDETERMINATE
    cleaned_value = value.strip()
    cleaned_range = range_spec.strip()
    if not cleaned_value or not cleaned_range:
        return INDETERMINATE

    if is_skipped(category_name, test_type_name, exceptions):
        return INDETERMINATE

    if _is_unjudgeable(cleaned_range):
        return INDETERMINATE
    if _is_labelled_negative_positive(cleaned_range):
        return _classify_labelled(cleaned_value, cleaned_range)
    if _LABELLED.match(cleaned_range) and not _COMPARATOR.match(cleaned_range):
        # Other "Label: range" forms (sex, pregnancy, ...) are not judged
        return INDETERMINATE

    number = parse_number(cleaned_value)
    if number is None:
        if _starts_textual(cleaned_range):
            return IN_RANGE if cleaned_value.casefold() == cleaned_range.casefold() else INDETERMINATE
        return INDETERMINATE

    if _starts_textual(cleaned_range):
        return INDETERMINATE
    return compare_numeric(number, cleaned_range)
