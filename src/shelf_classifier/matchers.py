"""Per-field matching strategies on top of similarity().

Genre and subgenre take the single best candidate, tropes are matched
one input at a time, and spice levels go through notation detection
(digit, keyword, pepper count) instead of generic similarity.

Ties between equal-scoring candidates go to the candidate listed first
in the vocabulary.
"""

from collections.abc import Iterable, Sequence

from loguru import logger

from .models import (
    DEFAULT_MATCH_THRESHOLD,
    DEFAULT_MAX_TROPES,
    DEFAULT_SUGGESTION_LIMIT,
    PEPPER_GLYPH,
    SPICE_KEYWORDS,
    SPICE_LEVELS,
    SUGGESTION_FLOOR,
    MatchResult,
    TropeOutcome,
)
from .similarity import similarity
from .vocabulary import Vocabulary

log = logger.bind(stage="match")

# Longest first so "very steamy" wins over "steamy", "extremely hot" over "hot"
_KEYWORDS_BY_LENGTH = sorted(SPICE_KEYWORDS.items(), key=lambda kv: -len(kv[0]))


def best_match(
    text: str | None,
    candidates: Iterable[str],
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> MatchResult | None:
    """Return the highest-scoring candidate at or above threshold."""
    if not text:
        return None

    best_value = None
    best_score = -1.0
    for candidate in candidates:
        score = similarity(text, candidate)
        if score > best_score:
            best_value, best_score = candidate, score

    if best_value is None or best_score < threshold:
        log.debug(f"No match for {text!r} (best={best_value!r} score={best_score:.2f})")
        return None

    return MatchResult(value=best_value, confidence=best_score, input=text)


def _require_text(name: str, text: object) -> None:
    if text is not None and not isinstance(text, str):
        raise TypeError(f"{name} must be a string, got {type(text).__name__}")


def match_genre(
    vocabulary: Vocabulary,
    text: str | None,
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> MatchResult | None:
    """Best genre for text; raises TypeError for non-string input."""
    _require_text("genre", text)
    return best_match(text, vocabulary.genres, threshold)


def match_subgenre(
    vocabulary: Vocabulary,
    text: str | None,
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> MatchResult | None:
    _require_text("subgenre", text)
    return best_match(text, vocabulary.subgenres, threshold)


def match_trope_outcomes(
    vocabulary: Vocabulary,
    inputs: Sequence[str],
    threshold: float = DEFAULT_MATCH_THRESHOLD,
) -> list[TropeOutcome]:
    """Match each trope input independently, keeping failures.

    Empty entries are skipped and non-string entries become failed
    outcomes carrying an error. Raises TypeError if inputs is not a
    list/tuple.
    """
    if not isinstance(inputs, (list, tuple)):
        raise TypeError(f"tropes must be a list, got {type(inputs).__name__}")

    outcomes = []
    for item in inputs:
        if not item:
            continue
        if not isinstance(item, str):
            log.debug(f"Unreadable trope entry {item!r}")
            outcomes.append(
                TropeOutcome(
                    input=item,
                    error=f"trope entries must be strings, got {type(item).__name__}",
                )
            )
            continue
        outcomes.append(
            TropeOutcome(input=item, match=best_match(item, vocabulary.tropes, threshold))
        )
    return outcomes


def match_tropes(
    vocabulary: Vocabulary,
    inputs: Sequence[str],
    threshold: float = DEFAULT_MATCH_THRESHOLD,
    max_results: int = DEFAULT_MAX_TROPES,
) -> list[MatchResult]:
    """Matched tropes only, highest confidence first, capped at max_results."""
    matches = [
        o.match
        for o in match_trope_outcomes(vocabulary, inputs, threshold)
        if o.match is not None
    ]
    matches.sort(key=lambda m: m.confidence, reverse=True)
    return matches[:max_results]


def match_spice_level(value: str | int | None) -> MatchResult | None:
    """Interpret a spice rating written as a digit, keyword, or pepper count."""
    if value is None or value == "":
        return None

    text = str(value).lower().strip()

    if text in {str(level) for level in SPICE_LEVELS}:
        return MatchResult(value=int(text), confidence=1.0, input=value)

    for keyword, level in _KEYWORDS_BY_LENGTH:
        if keyword in text:
            return MatchResult(
                value=level,
                confidence=0.8,
                input=value,
                reason=f'Matched keyword: "{keyword}"',
            )

    peppers = text.count(PEPPER_GLYPH)
    if peppers in SPICE_LEVELS:
        return MatchResult(
            value=peppers,
            confidence=0.9,
            input=value,
            reason=f"Counted {peppers} pepper emoji(s)",
        )

    log.debug(f"No spice level match for {value!r}")
    return None


def suggest_alternatives(
    text: str | None,
    candidates: Iterable[str],
    limit: int = DEFAULT_SUGGESTION_LIMIT,
) -> list[str]:
    """Near-miss candidates scoring above 0.3, best first."""
    scored = [(c, similarity(text, c)) for c in candidates]
    scored = [item for item in scored if item[1] > SUGGESTION_FLOOR]
    scored.sort(key=lambda item: item[1], reverse=True)
    return [c for c, _ in scored[:limit]]
