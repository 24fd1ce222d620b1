"""Classifier configuration via pydantic-settings (.env + env vars)."""

import sys
from pathlib import Path

from loguru import logger
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import ValidationOptions


class ClassifierConfig(BaseSettings):
    """All classifier configuration with layered resolution:
    .env file < environment variables < constructor kwargs.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # -- Vocabulary --
    vocabulary_path: Path = Path("classifications.yaml")

    # -- Matching --
    match_threshold: float = 0.6

    # -- Validation (stricter than matching) --
    genre_validation_threshold: float = 0.7
    subgenre_validation_threshold: float = 0.7
    trope_validation_threshold: float = 0.6
    allow_suggestions: bool = True

    # -- Logging --
    log_level: str = "INFO"
    log_dir: Path | None = None

    def validation_options(self) -> ValidationOptions:
        return ValidationOptions(
            genre_threshold=self.genre_validation_threshold,
            subgenre_threshold=self.subgenre_validation_threshold,
            trope_threshold=self.trope_validation_threshold,
            allow_suggestions=self.allow_suggestions,
        )

    def setup_logging(self) -> None:
        """Configure loguru for the classifier."""
        logger.remove()  # Remove default stderr handler

        log_format = (
            "{time:YYYY-MM-DDTHH:mm:ssZ} | {level:<8} | "
            "{extra[stage]:<10} | {message}"
        )

        def _default_extra(record):
            record["extra"].setdefault("stage", "")
            return True

        logger.add(
            sys.stderr,
            format=log_format,
            level=self.log_level.upper(),
            filter=_default_extra,
        )

        if self.log_dir is None:
            return

        self.log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(self.log_dir / "classifier.log"),
            format=log_format,
            level="DEBUG",
            rotation="10 MB",
            retention="30 days",
            filter=_default_extra,
        )
