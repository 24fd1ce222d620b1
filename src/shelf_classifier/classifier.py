"""Book classification and validation against the controlled vocabulary.

FuzzyClassifier holds nothing but a read-only Vocabulary, so one instance
can be shared between callers once load_vocabulary() has succeeded.
"""

from pathlib import Path
from statistics import fmean
from typing import Any

from loguru import logger

from .errors import UnsupportedFieldError
from .matchers import (
    match_genre,
    match_spice_level,
    match_subgenre,
    match_trope_outcomes,
    match_tropes,
    suggest_alternatives,
)
from .models import (
    DEFAULT_MATCH_THRESHOLD,
    DEFAULT_MAX_TROPES,
    SPICE_LEVELS,
    ClassificationField,
    ClassificationResult,
    FieldIssue,
    IssueKind,
    MatchResult,
    ValidationOptions,
    ValidationResult,
)
from .vocabulary import Vocabulary, load_vocabulary

log = logger.bind(stage="classify")

# Field aliases accepted by match_field()
_FIELD_ALIASES = {
    "genre": ClassificationField.GENRE,
    "subgenre": ClassificationField.SUBGENRE,
    "tropes": ClassificationField.TROPES,
    "trope": ClassificationField.TROPES,
    "spice": ClassificationField.SPICE,
    "spice_level": ClassificationField.SPICE,
}

MATCH_FIELD_SUGGESTION_LIMIT = 5


def resolve_field(name: str) -> ClassificationField:
    """Map a field name or alias to a ClassificationField (raises UnsupportedFieldError)."""
    resolved = _FIELD_ALIASES.get(str(name).lower().strip())
    if resolved is None:
        raise UnsupportedFieldError(name)
    return resolved


def _is_present(field: ClassificationField, value: Any) -> bool:
    # 0 is a (bad) spice rating, not a missing one
    if field is ClassificationField.SPICE:
        return value is not None and value != ""
    return bool(value)


class FuzzyClassifier:
    """Match free-text classifications to canonical vocabulary values."""

    def __init__(self, vocabulary: Vocabulary) -> None:
        self._vocabulary = vocabulary

    @classmethod
    def from_file(cls, path: Path) -> "FuzzyClassifier":
        """Load the vocabulary and build a classifier (raises InitializationError)."""
        return cls(load_vocabulary(path))

    @property
    def vocabulary(self) -> Vocabulary:
        return self._vocabulary

    # -- Field matchers --

    def match_genre(
        self, text: str | None, threshold: float = DEFAULT_MATCH_THRESHOLD
    ) -> MatchResult | None:
        return match_genre(self._vocabulary, text, threshold)

    def match_subgenre(
        self, text: str | None, threshold: float = DEFAULT_MATCH_THRESHOLD
    ) -> MatchResult | None:
        return match_subgenre(self._vocabulary, text, threshold)

    def match_tropes(
        self,
        inputs: list[str],
        threshold: float = DEFAULT_MATCH_THRESHOLD,
        max_results: int = DEFAULT_MAX_TROPES,
    ) -> list[MatchResult]:
        return match_tropes(self._vocabulary, inputs, threshold, max_results)

    def match_spice_level(self, value: str | int | None) -> MatchResult | None:
        return match_spice_level(value)

    def match_field(
        self, field: str, value: Any, threshold: float | None = None
    ) -> MatchResult | list[MatchResult] | None:
        """Match a single field by name.

        Trope values may be a single string or a list and always return a
        list. Raises UnsupportedFieldError for unknown field names.
        """
        resolved = resolve_field(field)
        threshold = DEFAULT_MATCH_THRESHOLD if threshold is None else threshold
        log.debug(f"match_field(field={resolved}, value={value!r}, threshold={threshold})")

        if resolved is ClassificationField.GENRE:
            return self.match_genre(value, threshold)
        if resolved is ClassificationField.SUBGENRE:
            return self.match_subgenre(value, threshold)
        if resolved is ClassificationField.TROPES:
            tropes = value if isinstance(value, (list, tuple)) else [value]
            return self.match_tropes(tropes, threshold)
        return self.match_spice_level(value)

    # -- Suggestions --

    def _candidates(self, field: ClassificationField) -> tuple[str, ...]:
        if field is ClassificationField.GENRE:
            return self._vocabulary.genres
        if field is ClassificationField.SUBGENRE:
            return self._vocabulary.subgenres
        if field is ClassificationField.TROPES:
            return self._vocabulary.tropes
        return ()

    def _suggest_many(self, inputs: list[Any], limit: int) -> list[str]:
        merged: dict[str, None] = {}
        for item in inputs:
            for s in suggest_alternatives(item, self._vocabulary.tropes, limit):
                merged.setdefault(s, None)
        return list(merged)

    def suggestions_for(
        self, field: str, value: Any, limit: int = MATCH_FIELD_SUGGESTION_LIMIT
    ) -> list[str]:
        """Near-miss vocabulary values for a field, e.g. after a failed match_field()."""
        resolved = resolve_field(field)
        if resolved is ClassificationField.TROPES:
            items = value if isinstance(value, (list, tuple)) else [value]
            return self._suggest_many(list(items), limit)
        return suggest_alternatives(value, self._candidates(resolved), limit)

    # -- Classification --

    def _classify_single(
        self,
        field: ClassificationField,
        value: Any,
        match: MatchResult | None,
        result: ClassificationResult,
    ) -> None:
        if match is not None:
            result.matched[field] = match.value
            result.confidence[field] = match.confidence
            if match.reason:
                result.reasons[field] = match.reason
            return

        result.errors.append(
            FieldIssue(
                field=field,
                input=value,
                kind=IssueKind.NO_MATCH,
                message=f'No {field} match found for: "{value}"',
            )
        )
        candidates = self._candidates(field)
        if candidates:
            result.suggestions[field] = suggest_alternatives(value, candidates)

    def _classify_tropes(self, value: Any, result: ClassificationResult) -> None:
        outcomes = match_trope_outcomes(self._vocabulary, value)
        matches = sorted(
            (o.match for o in outcomes if o.match is not None),
            key=lambda m: m.confidence,
            reverse=True,
        )[:DEFAULT_MAX_TROPES]
        misses = [o.input for o in outcomes if not o.matched and not o.error]
        unreadable = [o for o in outcomes if o.error]

        result.trope_outcomes = outcomes
        if matches:
            result.matched[ClassificationField.TROPES] = [m.value for m in matches]
            result.trope_matches = matches
            result.confidence[ClassificationField.TROPES] = fmean(
                m.confidence for m in matches
            )
        elif not outcomes:
            result.errors.append(
                FieldIssue(
                    field=ClassificationField.TROPES,
                    input=value,
                    kind=IssueKind.NO_MATCH,
                    message="No trope matches found: no usable trope entries",
                )
            )

        for miss in misses:
            result.errors.append(
                FieldIssue(
                    field=ClassificationField.TROPES,
                    input=miss,
                    kind=IssueKind.NO_MATCH,
                    message=f'No trope match found for: "{miss}"',
                )
            )
        for outcome in unreadable:
            result.errors.append(
                FieldIssue(
                    field=ClassificationField.TROPES,
                    input=outcome.input,
                    kind=IssueKind.INVALID_INPUT,
                    message=f"Classification error: {outcome.error}",
                )
            )
        if misses:
            result.suggestions[ClassificationField.TROPES] = self._suggest_many(
                misses, limit=3
            )

    def classify_book(self, record: dict) -> ClassificationResult:
        """Classify every present field of a book record.

        Never raises: unmatched fields become NO_MATCH errors with
        suggestions, and unexpected failures while handling a field become
        INVALID_INPUT errors without aborting the other fields.
        """
        result = ClassificationResult(original=record)

        if not isinstance(record, dict):
            result.errors.append(
                FieldIssue(
                    field=None,
                    input=record,
                    kind=IssueKind.INVALID_INPUT,
                    message=(
                        "Classification error: record must be a mapping, "
                        f"got {type(record).__name__}"
                    ),
                )
            )
            return result

        for field in ClassificationField:
            value = record.get(field)
            if not _is_present(field, value):
                continue
            try:
                if field is ClassificationField.GENRE:
                    self._classify_single(field, value, self.match_genre(value), result)
                elif field is ClassificationField.SUBGENRE:
                    self._classify_single(field, value, self.match_subgenre(value), result)
                elif field is ClassificationField.TROPES:
                    self._classify_tropes(value, result)
                else:
                    self._classify_single(field, value, self.match_spice_level(value), result)
            except Exception as exc:
                log.warning(f"Classification error on {field}={value!r}: {exc}")
                result.errors.append(
                    FieldIssue(
                        field=field,
                        input=value,
                        kind=IssueKind.INVALID_INPUT,
                        message=f"Classification error: {exc}",
                    )
                )

        if result.confidence:
            result.overall_confidence = fmean(result.confidence.values())

        log.debug(
            f"Classified record: matched={sorted(result.matched)} "
            f"errors={len(result.errors)} overall={result.overall_confidence:.2f}"
        )
        return result

    # -- Validation --

    def validate_book_data(
        self, record: dict, options: ValidationOptions | None = None
    ) -> ValidationResult:
        """Apply acceptance thresholds on top of classify_book().

        A weak genre makes the record invalid; weak subgenre and trope
        matches only produce warnings. `matched` always carries the
        resolved values, whatever the verdict.
        """
        opts = options or ValidationOptions()
        classification = self.classify_book(record)
        validation = ValidationResult(
            matched=dict(classification.matched),
            classification=classification,
        )

        if not isinstance(record, dict):
            validation.is_valid = False
            validation.errors.extend(classification.errors)
            return validation

        unreadable = {
            issue.field: issue
            for issue in classification.errors
            if issue.kind is IssueKind.INVALID_INPUT
        }

        genre = record.get(ClassificationField.GENRE)
        if ClassificationField.GENRE in unreadable:
            validation.is_valid = False
            validation.errors.append(unreadable[ClassificationField.GENRE])
        elif genre:
            score = classification.confidence.get(ClassificationField.GENRE)
            if score is None or score < opts.genre_threshold:
                validation.is_valid = False
                validation.errors.append(
                    FieldIssue(
                        field=ClassificationField.GENRE,
                        input=genre,
                        kind=IssueKind.NO_MATCH if score is None else IssueKind.LOW_CONFIDENCE,
                        message=f'Genre "{genre}" confidence too low ({score or 0:.2f})',
                    )
                )
                if opts.allow_suggestions:
                    validation.suggestions[ClassificationField.GENRE] = (
                        classification.suggestions.get(ClassificationField.GENRE)
                        or suggest_alternatives(genre, self._vocabulary.genres)
                    )

        subgenre = record.get(ClassificationField.SUBGENRE)
        if subgenre and ClassificationField.SUBGENRE not in unreadable:
            score = classification.confidence.get(ClassificationField.SUBGENRE)
            if score is None or score < opts.subgenre_threshold:
                validation.warnings.append(
                    FieldIssue(
                        field=ClassificationField.SUBGENRE,
                        input=subgenre,
                        kind=IssueKind.NO_MATCH if score is None else IssueKind.LOW_CONFIDENCE,
                        message=f'Subgenre "{subgenre}" confidence low ({score or 0:.2f})',
                    )
                )
                if opts.allow_suggestions:
                    validation.suggestions[ClassificationField.SUBGENRE] = (
                        classification.suggestions.get(ClassificationField.SUBGENRE)
                        or suggest_alternatives(subgenre, self._vocabulary.subgenres)
                    )

        weak = [
            o.input
            for o in classification.trope_outcomes
            if not o.error and o.confidence < opts.trope_threshold
        ]
        if weak:
            validation.warnings.append(
                FieldIssue(
                    field=ClassificationField.TROPES,
                    input=weak,
                    kind=IssueKind.LOW_CONFIDENCE,
                    message=f"Low confidence tropes: {', '.join(weak)}",
                )
            )
            if opts.allow_suggestions and ClassificationField.TROPES in classification.suggestions:
                validation.suggestions[ClassificationField.TROPES] = (
                    classification.suggestions[ClassificationField.TROPES]
                )

        # Unreadable non-genre fields don't reject the record but must be visible
        validation.warnings.extend(
            issue
            for issue in classification.errors
            if issue.kind is IssueKind.INVALID_INPUT
            and issue.field is not ClassificationField.GENRE
        )

        if validation.is_valid:
            log.debug(f"Record valid with {len(validation.warnings)} warning(s)")
        else:
            log.info(f"Record rejected: {'; '.join(map(str, validation.errors))}")
        return validation

    # -- Vocabulary advertisement --

    def get_available_classifications(self) -> dict:
        return {
            "genres": list(self._vocabulary.genres),
            "subgenres": list(self._vocabulary.subgenres),
            "tropes": list(self._vocabulary.tropes),
            "spice_levels": list(SPICE_LEVELS),
            "spice_descriptions": [dict(d) for d in self._vocabulary.spice_descriptions],
        }

    def describe_matching(self) -> dict:
        """Matching capabilities an API layer can advertise alongside the vocabulary."""
        return {
            "enabled": True,
            "algorithms": ["levenshtein", "jaccard", "token_similarity"],
            "confidence_threshold": DEFAULT_MATCH_THRESHOLD,
            "fields": [str(f) for f in ClassificationField],
        }
