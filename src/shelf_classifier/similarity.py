"""String similarity scoring for vocabulary matching.

No single metric tolerates both character typos ("enemys") and word
reordering ("lovers to enemies"), so similarity() takes the best of
three heuristics after the exact and substring fast paths:

    levenshtein_similarity -- character edit distance, normalized
    jaccard_similarity     -- overlap of whitespace token sets
    token_similarity       -- sorted-token comparison with per-token typos
"""

from rapidfuzz.distance import Levenshtein

# Per-token edit similarity needed to count two words as the same
TOKEN_MATCH_FLOOR = 0.8
REORDERED_SCORE = 0.9

CONTAINMENT_BASE = 0.8
CONTAINMENT_SPAN = 0.15


def _normalize(s: object) -> str:
    return str(s).lower().strip() if s else ""


def levenshtein_similarity(a: str, b: str) -> float:
    """1 - edit_distance / longer_length. Two empty strings score 1.0."""
    return Levenshtein.normalized_similarity(a, b)


def jaccard_similarity(a: str, b: str) -> float:
    tokens_a = set(a.lower().split())
    tokens_b = set(b.lower().split())
    union = tokens_a | tokens_b
    if not union:
        return 0.0
    return len(tokens_a & tokens_b) / len(union)


def token_similarity(a: str, b: str) -> float:
    """Compare sorted word lists.

    Same words in any order score 0.9. Otherwise each token of `a` claims
    at most one unclaimed token of `b` with edit similarity >= 0.8, and the
    claim count is divided by the larger token count.
    """
    tokens_a = sorted(a.lower().split())
    tokens_b = sorted(b.lower().split())

    if tokens_a and tokens_a == tokens_b:
        return REORDERED_SCORE

    total = max(len(tokens_a), len(tokens_b))
    if total == 0:
        return 0.0

    claimed: set[int] = set()
    matches = 0
    for token_a in tokens_a:
        for idx, token_b in enumerate(tokens_b):
            if idx in claimed:
                continue
            if levenshtein_similarity(token_a, token_b) >= TOKEN_MATCH_FLOOR:
                claimed.add(idx)
                matches += 1
                break

    return matches / total


def similarity(a: str | None, b: str | None) -> float:
    """Score how well two strings match, in [0, 1]."""
    s1 = _normalize(a)
    s2 = _normalize(b)
    if not s1 or not s2:
        return 0.0

    if s1 == s2:
        return 1.0

    if s1 in s2 or s2 in s1:
        shorter, longer = sorted((len(s1), len(s2)))
        return CONTAINMENT_BASE + (shorter / longer) * CONTAINMENT_SPAN

    return max(
        levenshtein_similarity(s1, s2),
        jaccard_similarity(s1, s2),
        token_similarity(s1, s2),
    )
