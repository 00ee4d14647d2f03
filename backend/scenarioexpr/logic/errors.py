"""
Error types for condition expressions.

Every failure raised while parsing or evaluating a condition document
derives from ExpressionError, so hosts can catch the whole family at once.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Optional, Sequence


class ExpressionError(Exception):
    """Base class for condition expression failures."""


class ParseError(ExpressionError, ValueError):
    """The document does not match any recognized expression form."""

    def __init__(self, message: str, path: str = "$"):
        self.message = message
        self.path = path
        super().__init__(f"{path}: {message}")


class ArityError(ParseError):
    """A logical operator received the wrong number of operands."""

    def __init__(self, operator: str, expected: int, actual: int, path: str = "$"):
        self.operator = operator
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{operator} takes exactly {expected} operand(s), got {actual}",
            path,
        )


class ResolutionError(ExpressionError, LookupError):
    """A named procedure is not declared by the registry."""

    def __init__(self, name: str, declared: Optional[Sequence[str]] = None):
        self.name = name
        self.declared = list(declared or [])
        message = f"Failed to load predicate {name!r}"
        suggestion = self.suggestion
        if suggestion:
            message += f" (did you mean {suggestion!r}?)"
        super().__init__(message)

    @property
    def suggestion(self) -> Optional[str]:
        matches = get_close_matches(self.name, self.declared, n=1, cutoff=0.6)
        return matches[0] if matches else None


class EmptyExpressionError(ExpressionError):
    """evaluate() was called on a handle that owns no payload."""

    def __init__(self, message: str = "Cannot evaluate an empty expression"):
        super().__init__(message)


class UnsupportedExpressionError(ExpressionError):
    """The form is part of the grammar but has no evaluation rule yet."""

    def __init__(self, form: str):
        self.form = form
        super().__init__(f"{form} expressions are not supported yet")
