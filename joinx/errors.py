"""
JoinX Errors - Contract Violation Taxonomy
==========================================

Every error raised by JoinX is a local contract violation detected at the
point of use. Nothing is retried and nothing is clamped: a bad index or an
undeclared type tag fails immediately.

- IndexOutOfRange: a global position or global type id outside its bound
- UnknownType: a type tag that was never declared by its binding
"""

from typing import Any, Optional


class JoinError(Exception):
    """Base exception class for all JoinX errors."""

    pass


class IndexOutOfRange(JoinError, IndexError):
    """
    Raised when a position or type id falls outside its current valid bound.

    Example:
        >>> raise IndexOutOfRange(7, 3, what="global position")
        Traceback (most recent call last):
        ...
        joinx.errors.IndexOutOfRange: global position 7 out of range [0, 3)
    """

    def __init__(self, index: Any, bound: int, what: str = "index"):
        self.index = index
        self.bound = bound
        self.what = what
        super().__init__(f"{what} {index!r} out of range [0, {bound})")


class UnknownType(JoinError, LookupError):
    """Raised when a source reports a type tag its binding never declared."""

    def __init__(self, tag: Any, declared: Optional[tuple] = None):
        self.tag = tag
        self.declared = declared
        message = f"type tag {tag!r} was never declared"
        if declared is not None:
            message += f" (declared: {list(declared)!r})"
        super().__init__(message)
