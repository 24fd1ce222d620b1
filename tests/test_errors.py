"""Tests for errors.py -- exception hierarchy."""

from pathlib import Path

from shelf_classifier.errors import (
    ClassifierError,
    InitializationError,
    UnsupportedFieldError,
)


class TestExceptionHierarchy:
    def test_all_inherit_from_classifier_error(self):
        assert issubclass(InitializationError, ClassifierError)
        assert issubclass(UnsupportedFieldError, ClassifierError)

    def test_classifier_error_is_exception(self):
        assert issubclass(ClassifierError, Exception)


class TestInitializationError:
    def test_attributes(self):
        err = InitializationError("bad vocabulary", path=Path("classifications.yaml"))
        assert err.path == Path("classifications.yaml")
        assert "bad vocabulary" in str(err)

    def test_path_optional(self):
        assert InitializationError("boom").path is None


class TestUnsupportedFieldError:
    def test_attributes(self):
        err = UnsupportedFieldError("mood")
        assert err.field == "mood"
        assert "mood" in str(err)
