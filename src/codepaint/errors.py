"""Exception hierarchy for codepaint.

Every fatal condition in a run is raised as a ``CodePaintError`` (or a
subclass) and reaches the CLI entry point, which turns it into a non-zero
exit status.
"""

from __future__ import annotations


class CodePaintError(Exception):
    """Base class for all codepaint failures."""


class MissingInputError(CodePaintError):
    """Raised when a mandatory input document does not exist."""


class MalformedInputError(CodePaintError):
    """Raised when a mandatory input document cannot be parsed."""
