"""Shared fixtures: a small classifications vocabulary on disk."""

import pytest

from shelf_classifier.classifier import FuzzyClassifier
from shelf_classifier.vocabulary import load_vocabulary

CLASSIFICATIONS_YAML = """\
Genres:
  - Genre: Romance
    Subgenre: Contemporary Romance
  - Genre: Romance
    Subgenre: Historical Romance
  - Genre: Fantasy
    Subgenre: Epic Fantasy
  - Genre: Fantasy
    Subgenre: Urban Fantasy
  - Genre: Science Fiction
    Subgenre: Space Opera
  - Genre: Mystery
    Subgenre: Cozy Mystery
  - Genre: Thriller
Tropes:
  - Genre: Romance
    Tropes:
      - Enemies to Lovers
      - Fake Dating
      - Second Chance
      - Forced Proximity
  - Genre: Fantasy
    Tropes:
      - Chosen One
      - Found Family
      - Enemies to Lovers
Spice_Levels:
  - Level: 1
    Label: Clean
    Description: No sexual content
  - Level: 2
    Label: Mild
    Description: Kissing, closed door
  - Level: 3
    Label: Moderate
    Description: Some open door scenes
  - Level: 4
    Label: Hot
    Description: Explicit scenes
  - Level: 5
    Label: Scorching
    Description: Very explicit, frequent
"""


@pytest.fixture
def vocabulary_file(tmp_path):
    path = tmp_path / "classifications.yaml"
    path.write_text(CLASSIFICATIONS_YAML, encoding="utf-8")
    return path


@pytest.fixture
def vocabulary(vocabulary_file):
    return load_vocabulary(vocabulary_file)


@pytest.fixture
def classifier(vocabulary):
    return FuzzyClassifier(vocabulary)
