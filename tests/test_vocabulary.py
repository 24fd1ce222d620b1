"""Tests for vocabulary.py -- loading and flattening the classifications YAML."""

import dataclasses

import pytest

from shelf_classifier.errors import ClassifierError, InitializationError
from shelf_classifier.vocabulary import Vocabulary, load_vocabulary


class TestLoadVocabulary:
    def test_genres_deduplicated_in_order(self, vocabulary):
        assert vocabulary.genres == (
            "Romance",
            "Fantasy",
            "Science Fiction",
            "Mystery",
            "Thriller",
        )

    def test_subgenres_skip_missing(self, vocabulary):
        assert len(vocabulary.subgenres) == 6
        assert vocabulary.subgenres[0] == "Contemporary Romance"
        assert "Cozy Mystery" in vocabulary.subgenres

    def test_tropes_flattened_and_deduplicated(self, vocabulary):
        assert vocabulary.tropes.count("Enemies to Lovers") == 1
        assert len(vocabulary.tropes) == 6
        assert vocabulary.tropes[-1] == "Found Family"

    def test_spice_levels(self, vocabulary):
        assert vocabulary.spice_labels == ("Clean", "Mild", "Moderate", "Hot", "Scorching")
        assert vocabulary.spice_descriptions[0]["Level"] == 1

    def test_counts(self, vocabulary):
        assert vocabulary.counts() == {
            "genres": 5,
            "subgenres": 6,
            "tropes": 6,
            "spice_levels": 5,
        }

    def test_immutable(self, vocabulary):
        with pytest.raises(dataclasses.FrozenInstanceError):
            vocabulary.genres = ("Horror",)

    def test_accepts_str_path(self, vocabulary_file):
        assert load_vocabulary(str(vocabulary_file)).genres[0] == "Romance"


class TestInitializationErrors:
    def _write(self, tmp_path, text: str):
        path = tmp_path / "bad.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    def test_missing_file(self, tmp_path):
        with pytest.raises(InitializationError) as exc_info:
            load_vocabulary(tmp_path / "nope.yaml")
        assert exc_info.value.path == tmp_path / "nope.yaml"

    def test_invalid_yaml(self, tmp_path):
        path = self._write(tmp_path, "Genres: [unclosed\n")
        with pytest.raises(InitializationError):
            load_vocabulary(path)

    def test_top_level_not_mapping(self, tmp_path):
        path = self._write(tmp_path, "- Romance\n- Fantasy\n")
        with pytest.raises(InitializationError, match="mapping"):
            load_vocabulary(path)

    def test_empty_document(self, tmp_path):
        path = self._write(tmp_path, "")
        with pytest.raises(InitializationError):
            load_vocabulary(path)

    @pytest.mark.parametrize("missing", ["Genres", "Tropes", "Spice_Levels"])
    def test_missing_section(self, tmp_path, missing):
        sections = {
            "Genres": "Genres:\n  - Genre: Romance\n",
            "Tropes": "Tropes:\n  - Tropes: [Fake Dating]\n",
            "Spice_Levels": "Spice_Levels:\n  - Label: Clean\n",
        }
        del sections[missing]
        path = self._write(tmp_path, "".join(sections.values()))
        with pytest.raises(InitializationError, match=missing):
            load_vocabulary(path)

    def test_genre_entry_without_genre(self, tmp_path):
        path = self._write(
            tmp_path,
            "Genres:\n  - Subgenre: Cozy Mystery\nTropes: []\nSpice_Levels: []\n",
        )
        with pytest.raises(InitializationError, match="Genre"):
            load_vocabulary(path)

    def test_trope_group_not_a_list(self, tmp_path):
        path = self._write(
            tmp_path,
            "Genres: []\nTropes:\n  - Tropes: Fake Dating\nSpice_Levels: []\n",
        )
        with pytest.raises(InitializationError, match="Tropes"):
            load_vocabulary(path)

    def test_spice_level_without_label(self, tmp_path):
        path = self._write(
            tmp_path,
            "Genres: []\nTropes: []\nSpice_Levels:\n  - Level: 1\n",
        )
        with pytest.raises(InitializationError, match="Label"):
            load_vocabulary(path)

    def test_is_classifier_error(self):
        assert issubclass(InitializationError, ClassifierError)


class TestEmptyVocabulary:
    def test_sections_may_be_empty(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("Genres: []\nTropes: []\nSpice_Levels: []\n")
        assert load_vocabulary(path) == Vocabulary()
