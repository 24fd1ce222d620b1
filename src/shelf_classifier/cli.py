"""CLI entry point for the classification matcher."""

import json
import sys
from pathlib import Path

import click
from loguru import logger

from .classifier import FuzzyClassifier, resolve_field
from .config import ClassifierConfig
from .errors import ClassifierError, UnsupportedFieldError
from .models import ClassificationField, MatchResult, ValidationOptions

log = logger.bind(stage="cli")


def _find_config_file() -> Path | None:
    """Look for .env next to the package or in cwd."""
    pkg_dir = Path(__file__).resolve().parent
    for candidate in [
        pkg_dir.parent.parent / ".env",  # dev: src/../.env
        Path.cwd() / ".env",
    ]:
        if candidate.is_file():
            return candidate
    return None


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _read_record(source: str) -> dict:
    """Read a book record from a JSON file path, or stdin for '-'."""
    try:
        text = sys.stdin.read() if source == "-" else Path(source).read_text()
        record = json.loads(text)
    except (OSError, json.JSONDecodeError) as exc:
        raise click.BadParameter(f"Cannot read record {source}: {exc}") from exc
    if not isinstance(record, dict):
        raise click.BadParameter(f"Record {source} must be a JSON object")
    return record


def _build_classifier(config: ClassifierConfig) -> FuzzyClassifier:
    try:
        return FuzzyClassifier.from_file(config.vocabulary_path)
    except ClassifierError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True),
    default=None,
    help="Path to .env file.",
)
@click.option(
    "--vocabulary",
    type=click.Path(dir_okay=False),
    default=None,
    help="Classifications YAML (overrides VOCABULARY_PATH).",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(
    ctx: click.Context,
    config_file: str | None,
    vocabulary: str | None,
    verbose: bool,
) -> None:
    """Match free-text genres, subgenres, tropes and spice levels to the vocabulary."""
    env_file = Path(config_file) if config_file else _find_config_file()

    # Pass CLI flags as kwargs so they win over env vars and .env
    config_kwargs: dict[str, str] = {}
    if vocabulary:
        config_kwargs["vocabulary_path"] = vocabulary
    if verbose:
        config_kwargs["log_level"] = "DEBUG"

    config = ClassifierConfig(_env_file=env_file, **config_kwargs)  # type: ignore[arg-type]
    config.setup_logging()
    log.debug(f"Config loaded (env_file={env_file}, vocabulary={config.vocabulary_path})")

    ctx.obj = config


@main.command()
@click.pass_obj
def vocabulary(config: ClassifierConfig) -> None:
    """Print the available classifications as JSON."""
    classifier = _build_classifier(config)
    _echo_json(
        {
            "classifications": classifier.get_available_classifications(),
            "fuzzy_matching": classifier.describe_matching(),
        }
    )


@main.command()
@click.argument("field")
@click.argument("values", nargs=-1, required=True)
@click.option("--threshold", type=float, default=None, help="Minimum confidence.")
@click.pass_obj
def match(
    config: ClassifierConfig,
    field: str,
    values: tuple[str, ...],
    threshold: float | None,
) -> None:
    """Match VALUES against the vocabulary for FIELD (genre, subgenre, tropes, spice)."""
    classifier = _build_classifier(config)
    threshold = config.match_threshold if threshold is None else threshold
    try:
        resolved = resolve_field(field)
    except UnsupportedFieldError as exc:
        raise click.UsageError(str(exc)) from exc

    # Unquoted words are one value, except for tropes where each is an entry
    if resolved is ClassificationField.TROPES:
        value = list(values)
    else:
        value = " ".join(values)

    result = classifier.match_field(field, value, threshold)

    if not result:
        _echo_json(
            {
                "field": field,
                "original_value": value,
                "match": None,
                "suggestions": classifier.suggestions_for(field, value),
                "threshold_used": threshold,
            }
        )
        sys.exit(1)

    if isinstance(result, MatchResult):
        payload = result.to_dict()
    else:
        payload = [m.to_dict() for m in result]
    _echo_json(
        {
            "field": field,
            "original_value": value,
            "match": payload,
            "threshold_used": threshold,
        }
    )


@main.command()
@click.argument("record", type=str)
@click.pass_obj
def classify(config: ClassifierConfig, record: str) -> None:
    """Classify a book RECORD (JSON file, or '-' for stdin)."""
    classifier = _build_classifier(config)
    result = classifier.classify_book(_read_record(record))
    log.info(
        f"Classification completed: confidence={result.overall_confidence:.2f} "
        f"errors={len(result.errors)}"
    )
    _echo_json(
        {
            "classification": result.to_dict(),
            "recommendations": result.recommendations(),
        }
    )


@main.command()
@click.argument("record", type=str)
@click.option("--genre-threshold", type=float, default=None)
@click.option("--subgenre-threshold", type=float, default=None)
@click.option("--trope-threshold", type=float, default=None)
@click.option(
    "--no-suggestions", is_flag=True, help="Omit near-miss suggestions."
)
@click.pass_obj
def validate(
    config: ClassifierConfig,
    record: str,
    genre_threshold: float | None,
    subgenre_threshold: float | None,
    trope_threshold: float | None,
    no_suggestions: bool,
) -> None:
    """Validate a book RECORD; exits 1 if the record is rejected."""
    classifier = _build_classifier(config)
    defaults = config.validation_options()
    options = ValidationOptions(
        genre_threshold=defaults.genre_threshold if genre_threshold is None else genre_threshold,
        subgenre_threshold=(
            defaults.subgenre_threshold if subgenre_threshold is None else subgenre_threshold
        ),
        trope_threshold=defaults.trope_threshold if trope_threshold is None else trope_threshold,
        allow_suggestions=defaults.allow_suggestions and not no_suggestions,
    )

    result = classifier.validate_book_data(_read_record(record), options)
    _echo_json(result.to_dict())
    if not result.is_valid:
        sys.exit(1)
