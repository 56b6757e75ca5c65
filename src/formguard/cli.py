"""Formguard command-line interface."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
import yaml

from . import __version__
from .apikey import is_api_key_valid, mask_api_key
from .classifier import Classifier, check_connection
from .client import ClassificationClient
from .config import Config, ConfigError, load_config, resolve_config_path
from .errors import ClassificationError
from .logging import configure_logging
from .policy import SpamDecisionPolicy
from .types import FieldValue, Submission

app = typer.Typer(help="Formguard form spam check utilities.")
LOGGER = logging.getLogger(__name__)

FieldOption = Annotated[
    list[str] | None,
    typer.Option(
        "-F",
        "--field",
        help="Form field as name=value; repeat the flag for more fields.",
    ),
]
InputOption = Annotated[
    Path | None,
    typer.Option(
        "-i",
        "--input",
        help="YAML or JSON file holding a mapping of field names to values.",
    ),
]


@dataclass
class CLIState:
    """Stores shared CLI options."""

    config_path: Path | None


@app.callback()
def _formguard(
    ctx: typer.Context,
    config: Annotated[
        Path | None,
        typer.Option(
            "-c",
            "--config",
            help="Path to config (env FORMGUARD_CONFIG or ~/.config/formguard/config.yaml).",
        ),
    ] = None,
) -> None:
    """Capture global CLI options."""

    resolved = config.expanduser() if config else None
    ctx.obj = CLIState(config_path=resolved)


@app.command()
def check(
    ctx: typer.Context,
    form: Annotated[str, typer.Option("-f", "--form", help="Form identifier from config.")],
    field: FieldOption = None,
    input_file: InputOption = None,
    spam: Annotated[
        bool,
        typer.Option("--spam", help="Treat the submission as already flagged upstream."),
    ] = False,
) -> None:
    """Run the spam decision policy for one submission and print the verdict."""

    config = _prepare(ctx)
    fields = _collect_fields(field, input_file)
    classifier = Classifier(_build_client(config))
    policy = SpamDecisionPolicy(api_key=config.api_key, classifier=classifier)
    submission = Submission(form_id=form, fields=fields, config=config.form_config(form))

    verdict = policy.check_spam(spam, submission)

    typer.echo(f"Form: {form}")
    typer.echo(f"Verdict: {'blocked' if verdict else 'allowed'}")
    for label, count in sorted(policy.metrics.labels.items()):
        typer.echo(f"  label {label}: {count}")


@app.command()
def classify(
    ctx: typer.Context,
    field: FieldOption = None,
    input_file: InputOption = None,
) -> None:
    """Classify field data directly, without applying form settings."""

    config = _prepare(ctx)
    fields = _collect_fields(field, input_file)
    classifier = Classifier(_build_client(config))

    outcome = classifier.classify(fields, api_key=config.api_key)
    label = outcome.label
    if label is None:
        _classification_failure(outcome.error)
    typer.echo(f"Label: {label.value}")


@app.command("test-connection")
def test_connection(ctx: typer.Context) -> None:
    """Send one dummy classification to verify the API key and endpoint."""

    config = _prepare(ctx)
    if not config.api_key:
        typer.secho("No API key configured.", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    outcome = check_connection(Classifier(_build_client(config)), config.api_key)
    error = outcome.error
    if error is not None:
        message = "Invalid API key." if error.status == 401 else error.message
        typer.secho(f"Connection failed: {message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    typer.secho("API connection successful!", fg=typer.colors.GREEN)


@app.command()
def status(ctx: typer.Context) -> None:
    """Display Formguard configuration."""

    state = _state(ctx)
    config = _load_config(state.config_path)

    typer.echo("→ Formguard Status")
    typer.echo(f"Version: {__version__}")
    typer.echo(f"Config path: {resolve_config_path(state.config_path)}")
    typer.echo(f"Endpoint: {config.endpoint}")
    typer.echo(f"Model: {config.model}")
    if config.api_key:
        validity = "valid" if is_api_key_valid(config.api_key) else "invalid format"
        typer.echo(f"API key: {mask_api_key(config.api_key)} ({validity})")
    else:
        typer.echo("API key: not set")
    typer.echo("")
    typer.echo("Forms:")
    if not config.forms:
        typer.echo("  (none configured)")
    for form_id, form_config in sorted(config.forms.items()):
        enabled = "enabled" if form_config.enabled else "disabled"
        job_mode = "spam" if form_config.job_request_counts_as_spam else "allowed"
        typer.echo(f"  - {form_id}: {enabled}, job requests {job_mode}")


def _state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise RuntimeError("CLI state not initialised.")
    return state


def _prepare(ctx: typer.Context) -> Config:
    config = _load_config(_state(ctx).config_path)
    try:
        configure_logging(config.logging, config.root_dir)
    except ConfigError as exc:
        _config_failure(exc)
    return config


def _load_config(path: Path | None) -> Config:
    try:
        return load_config(path)
    except ConfigError as exc:
        _config_failure(exc)


def _config_failure(exc: ConfigError) -> NoReturn:
    typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
    raise typer.Exit(2) from exc


def _classification_failure(error: ClassificationError | None) -> NoReturn:
    detail = f"{error.message} (kind={error.kind.value})" if error else "no label returned"
    typer.secho(f"Classification failed: {detail}", fg=typer.colors.RED, err=True)
    raise typer.Exit(1)


def _build_client(config: Config) -> ClassificationClient:
    return ClassificationClient(
        endpoint=config.endpoint,
        model=config.model,
        timeout=config.timeout,
    )


def _collect_fields(pairs: Iterable[str] | None, input_file: Path | None) -> dict[str, FieldValue]:
    fields: dict[str, FieldValue] = {}
    if input_file is not None:
        fields.update(_read_field_file(input_file.expanduser()))
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        name = name.strip()
        if not sep or not name:
            typer.secho(
                f"Invalid field '{pair}'; expected name=value.", fg=typer.colors.RED, err=True
            )
            raise typer.Exit(1)
        existing = fields.get(name)
        if existing is None:
            fields[name] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            fields[name] = [str(existing), value]
    return fields


def _read_field_file(path: Path) -> dict[str, FieldValue]:
    if not path.is_file():
        typer.secho(f"Input file not found: {path}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    try:
        raw: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        typer.secho(f"Failed to parse input file: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc
    if not isinstance(raw, dict):
        typer.secho("Input file must contain a mapping of fields.", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)
    fields: dict[str, FieldValue] = {}
    for name, value in raw.items():
        if isinstance(value, list):
            fields[str(name)] = [str(item) for item in value if item is not None]
        elif value is not None:
            fields[str(name)] = str(value)
    return fields


def main() -> None:  # pragma: no cover - delegated to Typer
    app()


__all__ = ["app", "main"]
