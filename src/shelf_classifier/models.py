"""Core enums, constants, and result types for the classification matcher.

Enums:
    ClassificationField -- Record fields the matcher understands (genre,
                           subgenre, tropes, spice).
    IssueKind           -- Why a field produced an error or warning.

Results:
    MatchResult          -- One fuzzy match against the vocabulary.
    TropeOutcome         -- Per-input trope result, including failures.
    FieldIssue           -- Structured error/warning entry.
    ClassificationResult -- Output of FuzzyClassifier.classify_book().
    ValidationResult     -- Output of FuzzyClassifier.validate_book_data().
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class ClassificationField(StrEnum):
    GENRE = "genre"
    SUBGENRE = "subgenre"
    TROPES = "tropes"
    SPICE = "spice"


class IssueKind(StrEnum):
    NO_MATCH = "no_match"
    LOW_CONFIDENCE = "low_confidence"
    INVALID_INPUT = "invalid_input"


# Field matcher defaults
DEFAULT_MATCH_THRESHOLD = 0.6
DEFAULT_MAX_TROPES = 10
DEFAULT_SUGGESTION_LIMIT = 3
SUGGESTION_FLOOR = 0.3

# Classifications above this overall confidence can be applied without review
APPLY_CONFIDENCE_THRESHOLD = 0.7

SPICE_LEVELS: tuple[int, ...] = (1, 2, 3, 4, 5)

SPICE_KEYWORDS: dict[str, int] = {
    "clean": 1,
    "sweet": 1,
    "innocent": 1,
    "closed door": 1,
    "kisses": 2,
    "fade to black": 2,
    "behind closed doors": 2,
    "steamy": 3,
    "open door": 3,
    "moderate heat": 3,
    "hot": 4,
    "explicit": 4,
    "very steamy": 4,
    "scorching": 5,
    "erotic": 5,
    "extremely hot": 5,
    "graphic": 5,
}

# Hot pepper, counted with or without the emoji variation selector
PEPPER_GLYPH = "\U0001F336"


@dataclass(frozen=True)
class MatchResult:
    """A vocabulary value matched from free-text input."""

    value: str | int
    confidence: float
    input: Any
    reason: str | None = None

    def to_dict(self) -> dict:
        data = {
            "value": self.value,
            "confidence": round(self.confidence, 4),
            "input": self.input,
        }
        if self.reason:
            data["reason"] = self.reason
        return data


@dataclass(frozen=True)
class TropeOutcome:
    input: Any
    match: MatchResult | None = None
    # Set when the entry could not be matched at all (e.g. not a string)
    error: str = ""

    @property
    def matched(self) -> bool:
        return self.match is not None

    @property
    def confidence(self) -> float:
        return self.match.confidence if self.match else 0.0


@dataclass(frozen=True)
class FieldIssue:
    """An error or warning tied to one field of a record."""

    field: ClassificationField | None
    input: Any
    kind: IssueKind
    message: str

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        return {
            "field": str(self.field) if self.field else None,
            "input": self.input,
            "kind": str(self.kind),
            "message": self.message,
        }


@dataclass
class ClassificationResult:
    original: Any = field(default_factory=dict)
    matched: dict[str, Any] = field(default_factory=dict)
    confidence: dict[str, float] = field(default_factory=dict)
    trope_matches: list[MatchResult] = field(default_factory=list)
    trope_outcomes: list[TropeOutcome] = field(default_factory=list)
    reasons: dict[str, str] = field(default_factory=dict)
    suggestions: dict[str, list[str]] = field(default_factory=dict)
    errors: list[FieldIssue] = field(default_factory=list)
    overall_confidence: float = 0.0

    def recommendations(self) -> dict:
        """Hints for the caller on whether to apply the matches as-is."""
        return {
            "apply_matches": self.overall_confidence > APPLY_CONFIDENCE_THRESHOLD,
            "review_suggestions": bool(self.errors),
            "confidence_threshold": APPLY_CONFIDENCE_THRESHOLD,
        }

    def to_dict(self) -> dict:
        return {
            "original": self.original,
            "matched": self.matched,
            "confidence": {k: round(v, 4) for k, v in self.confidence.items()},
            "trope_matches": [m.to_dict() for m in self.trope_matches],
            "reasons": self.reasons,
            "suggestions": self.suggestions,
            "errors": [e.to_dict() for e in self.errors],
            "overall_confidence": round(self.overall_confidence, 4),
        }


@dataclass(frozen=True)
class ValidationOptions:
    """Acceptance thresholds, usually stricter than the matcher defaults."""

    genre_threshold: float = 0.7
    subgenre_threshold: float = 0.7
    trope_threshold: float = 0.6
    allow_suggestions: bool = True


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: list[FieldIssue] = field(default_factory=list)
    warnings: list[FieldIssue] = field(default_factory=list)
    suggestions: dict[str, list[str]] = field(default_factory=dict)
    matched: dict[str, Any] = field(default_factory=dict)
    classification: ClassificationResult | None = None

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "suggestions": self.suggestions,
            "matched": self.matched,
        }
