"""Friendly column labels derived from field names."""

import re

# Words rendered in upper case wherever they appear as a whole word
ABBREVIATIONS = {"id": "ID", "dob": "DOB", "nhs": "NHS", "gp": "GP"}

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|[_\s]+")


def to_friendly_name(name: str, *, is_key: bool = False) -> str:
    """Convert a field name to a Title Case label.

    camelCase and snake_case names are split into words. A trailing
    lowercase "id" on a key field (``doctorid``) is split off as "ID".

    >>> to_friendly_name("dateOfVisit")
    'Date Of Visit'
    >>> to_friendly_name("doctorid", is_key=True)
    'Doctor ID'
    """
    words = [w for w in _WORD_BOUNDARY.split(name) if w]
    if not words:
        return name

    last = words[-1]
    if is_key and len(last) > 2 and last.lower().endswith("id"):
        words[-1:] = [last[:-2], "id"]

    return " ".join(_format_word(w) for w in words)


def _format_word(word: str) -> str:
    lowered = word.lower()
    if lowered in ABBREVIATIONS:
        return ABBREVIATIONS[lowered]
    return word[:1].upper() + word[1:]
