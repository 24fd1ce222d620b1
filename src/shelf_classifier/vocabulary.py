"""Controlled vocabulary loaded once from the classifications YAML document.

Expected layout:

    Genres:
      - Genre: Romance
        Subgenre: Contemporary Romance
    Tropes:
      - Genre: Romance
        Tropes: [Enemies to Lovers, Fake Dating]
    Spice_Levels:
      - Level: 1
        Label: Clean
        Description: ...

Tropes are flattened into one global set (the per-genre grouping is dropped).
Any structural problem is an InitializationError -- no partial vocabulary.
"""

from dataclasses import dataclass
from pathlib import Path

import yaml
from loguru import logger

from .errors import InitializationError

log = logger.bind(stage="vocabulary")

REQUIRED_SECTIONS = ("Genres", "Tropes", "Spice_Levels")


@dataclass(frozen=True)
class Vocabulary:
    """Deduplicated candidate sets, in first-seen order."""

    genres: tuple[str, ...] = ()
    subgenres: tuple[str, ...] = ()
    tropes: tuple[str, ...] = ()
    spice_labels: tuple[str, ...] = ()
    spice_descriptions: tuple[dict, ...] = ()

    def counts(self) -> dict[str, int]:
        return {
            "genres": len(self.genres),
            "subgenres": len(self.subgenres),
            "tropes": len(self.tropes),
            "spice_levels": len(self.spice_labels),
        }


def _unique(values) -> tuple[str, ...]:
    # dict preserves insertion order, so the first occurrence wins
    return tuple(dict.fromkeys(values))


def _require_str(entry: dict, key: str, section: str, idx: int, path: Path) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InitializationError(
            f"{section}[{idx}] in {path} is missing a string {key!r}", path=path
        )
    return value.strip()


def parse_vocabulary(data: object, path: Path) -> Vocabulary:
    """Build a Vocabulary from an already-parsed YAML document."""
    if not isinstance(data, dict):
        raise InitializationError(
            f"Vocabulary {path} must be a mapping, got {type(data).__name__}",
            path=path,
        )

    for section in REQUIRED_SECTIONS:
        if not isinstance(data.get(section), list):
            raise InitializationError(
                f"Vocabulary {path} is missing the {section!r} list", path=path
            )

    genres: list[str] = []
    subgenres: list[str] = []
    for idx, entry in enumerate(data["Genres"]):
        if not isinstance(entry, dict):
            raise InitializationError(
                f"Genres[{idx}] in {path} is not a mapping", path=path
            )
        genres.append(_require_str(entry, "Genre", "Genres", idx, path))
        subgenre = entry.get("Subgenre")
        if subgenre is None or subgenre == "":
            continue
        if not isinstance(subgenre, str):
            raise InitializationError(
                f"Genres[{idx}] in {path} has a non-string 'Subgenre'", path=path
            )
        subgenres.append(subgenre.strip())

    tropes: list[str] = []
    for idx, group in enumerate(data["Tropes"]):
        if not isinstance(group, dict):
            raise InitializationError(
                f"Tropes[{idx}] in {path} is not a mapping", path=path
            )
        items = group.get("Tropes")
        if items is None:
            continue
        if not isinstance(items, list) or not all(isinstance(t, str) for t in items):
            raise InitializationError(
                f"Tropes[{idx}] in {path} must hold a list of strings", path=path
            )
        tropes.extend(t.strip() for t in items if t.strip())

    spice_labels: list[str] = []
    spice_descriptions: list[dict] = []
    for idx, entry in enumerate(data["Spice_Levels"]):
        if not isinstance(entry, dict):
            raise InitializationError(
                f"Spice_Levels[{idx}] in {path} is not a mapping", path=path
            )
        spice_labels.append(_require_str(entry, "Label", "Spice_Levels", idx, path))
        spice_descriptions.append(dict(entry))

    return Vocabulary(
        genres=_unique(genres),
        subgenres=_unique(subgenres),
        tropes=_unique(tropes),
        spice_labels=tuple(spice_labels),
        spice_descriptions=tuple(spice_descriptions),
    )


def load_vocabulary(path: Path) -> Vocabulary:
    """Read and parse the classifications document.

    Raises InitializationError if the file is missing, unreadable,
    not valid YAML, or structurally malformed.
    """
    path = Path(path)
    log.debug(f"load_vocabulary(path={path})")

    try:
        text = path.read_text(encoding="utf-8")
        data = yaml.safe_load(text)
    except (OSError, yaml.YAMLError) as exc:
        log.error(f"Failed to read vocabulary {path}: {exc}")
        raise InitializationError(
            f"Failed to read vocabulary {path}: {exc}", path=path
        ) from exc

    try:
        vocabulary = parse_vocabulary(data, path)
    except InitializationError as exc:
        log.error(f"Malformed vocabulary: {exc}")
        raise

    counts = vocabulary.counts()
    log.info(
        f"Vocabulary loaded from {path}: {counts['genres']} genres, "
        f"{counts['subgenres']} subgenres, {counts['tropes']} tropes, "
        f"{counts['spice_levels']} spice levels"
    )
    return vocabulary
