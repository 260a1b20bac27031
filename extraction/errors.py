"""
Error types raised while extracting declarations from a Go source file.

Every error aborts the current file only; the loader decides whether the
remaining files are still processed.
"""


class ExtractionError(RuntimeError):
    """Base class for failures that abort extraction of one file."""


class UnsupportedDeclarationShape(ExtractionError):
    """Raised when a type declaration is neither a struct nor a skippable alias."""


class UnsupportedTypeExpression(ExtractionError):
    """Raised when a type expression matches none of the classifier's shapes."""


class InvalidTagEntry(ExtractionError):
    """Raised when a field tag does not follow the ``key:"value"`` grammar."""


class SourceSyntaxError(ExtractionError):
    """Raised when the parsed tree contains syntax errors in strict mode."""
