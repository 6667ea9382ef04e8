from __future__ import annotations


class ReaderError(RuntimeError):
    """Base class for failures that surface to the reader as a notice."""


class PreconditionError(ReaderError):
    """Raised when an action needs a selection that has not been made yet."""


__all__ = ["ReaderError", "PreconditionError"]
