"""ShelfHelp classifier -- fuzzy matching of book classifications to a controlled vocabulary.

Core modules:
    vocabulary -- One-time load of the classifications YAML into an immutable
                  Vocabulary. Malformed sources raise InitializationError.
    similarity -- String similarity (exact, containment, Levenshtein, Jaccard,
                  token reordering), max of the heuristics.
    matchers   -- Per-field matching: genre/subgenre best match, per-input
                  trope matching, spice notation detection, suggestions.
    classifier -- FuzzyClassifier service: classify_book, validate_book_data,
                  match_field and vocabulary advertisement.
    config     -- Configuration via pydantic-settings, loguru setup
    cli        -- Click CLI (vocabulary, match, classify, validate)
"""
