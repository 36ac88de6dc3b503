"""Parse display expressions used by foreign-key and display-only fields.

Three syntaxes are accepted and produce the same parts:

    surname
    CONCAT(firstname, ' ', surname)
    firstname || ' ' || surname
"""

import re
from dataclasses import dataclass

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_CONCAT_CALL = re.compile(r"^concat\s*\((?P<args>.*)\)$", re.IGNORECASE | re.DOTALL)


@dataclass(frozen=True)
class ExpressionPart:
    """One piece of a display expression: a column reference or a literal."""

    value: str
    is_literal: bool = False


@dataclass(frozen=True)
class DisplayExpression:
    source: str
    parts: tuple[ExpressionPart, ...]

    @property
    def columns(self) -> list[str]:
        return [p.value for p in self.parts if not p.is_literal]

    @property
    def is_simple_column(self) -> bool:
        return len(self.parts) == 1 and not self.parts[0].is_literal


class ExpressionError(ValueError):
    """Raised when a display expression cannot be parsed."""


def parse_display_expression(source: str) -> DisplayExpression:
    """Parse a display expression into ordered column/literal parts.

    Raises:
        ExpressionError: if the expression is empty or contains anything
            other than column names and quoted string literals.
    """
    text = (source or "").strip()
    if not text:
        raise ExpressionError("Display expression is empty")

    match = _CONCAT_CALL.match(text)
    if match:
        tokens = _split(match.group("args"), ",")
    elif "||" in text:
        tokens = _split(text, "||")
    else:
        tokens = [text]

    parts = tuple(_parse_token(token, source) for token in tokens)
    return DisplayExpression(source=source, parts=parts)


def _split(text: str, separator: str) -> list[str]:
    """Split on a separator, ignoring separators inside quoted literals."""
    tokens: list[str] = []
    current: list[str] = []
    quote: str | None = None
    i = 0
    while i < len(text):
        char = text[i]
        if quote:
            current.append(char)
            if char == quote:
                quote = None
            i += 1
            continue
        if char in ("'", '"'):
            quote = char
            current.append(char)
            i += 1
            continue
        if text.startswith(separator, i):
            tokens.append("".join(current))
            current = []
            i += len(separator)
            continue
        current.append(char)
        i += 1

    if quote:
        raise ExpressionError(f"Unterminated string literal in '{text}'")
    tokens.append("".join(current))
    return tokens


def _parse_token(token: str, source: str) -> ExpressionPart:
    token = token.strip()
    if len(token) >= 2 and token[0] == token[-1] and token[0] in ("'", '"'):
        return ExpressionPart(value=token[1:-1], is_literal=True)
    if _IDENTIFIER.match(token):
        return ExpressionPart(value=token)
    raise ExpressionError(f"Unsupported token '{token}' in display expression '{source}'")
