"""Exception hierarchy for the classification matcher."""

from pathlib import Path


class ClassifierError(Exception):
    """Base exception for all classifier errors."""


class InitializationError(ClassifierError):
    """Vocabulary source is missing or malformed."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class UnsupportedFieldError(ClassifierError):
    """Field name has no matcher."""

    def __init__(self, field: str) -> None:
        super().__init__(
            f"Unsupported field {field!r}: expected genre, subgenre, tropes or spice"
        )
        self.field = field
