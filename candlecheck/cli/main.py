"""Main entry point for the candlecheck command line interface."""

from __future__ import annotations

from pathlib import Path

import typer

from candlecheck.core.exceptions import ConfigurationError
from candlecheck.core.config import load_settings
from candlecheck.core.logging import configure_logging

from .constants import VALIDATION_EXIT_CODE
from .formatters import create_formatter
from .reconciliation import register as register_reconcile_commands
from .trades import register as register_trade_commands
from .utils import emit_error


def create_app() -> typer.Typer:
    """Create a Typer application instance for candlecheck."""

    app = typer.Typer(add_completion=False, help="Candlestick versus trade tape consistency checks")

    @app.callback()
    def main(
        ctx: typer.Context,
        format: str = typer.Option(
            "table",
            "--format",
            "-f",
            help="Output format (table or jsonl).",
            show_default=True,
        ),
        output: Path | None = typer.Option(
            None,
            "--output",
            "-o",
            help="Write output to a file instead of stdout.",
        ),
        config: Path | None = typer.Option(
            None,
            "--config",
            help="Settings TOML file (defaults to ~/.candlecheck/config.toml).",
        ),
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            help="Logging level; overrides the settings file.",
        ),
        no_color: bool = typer.Option(
            False,
            "--no-color",
            help="Disable colorized output for table format.",
        ),
    ) -> None:
        ctx.ensure_object(dict)
        normalized_format = format.strip().lower()
        try:
            create_formatter(normalized_format, no_color=no_color)
        except ValueError as exc:
            raise typer.BadParameter(str(exc), param_hint="--format") from exc

        try:
            settings = load_settings(config)
        except ConfigurationError as error:
            emit_error(error.message, error.error_code, details=error.details)
            raise typer.Exit(code=VALIDATION_EXIT_CODE) from error

        level = (log_level or settings.logging.level).upper()
        configure_logging(
            level,
            file_output=settings.logging.file is not None,
            file_path=settings.logging.file,
        )
        ctx.obj.update(
            {
                "format": normalized_format,
                "output_path": output,
                "no_color": no_color,
                "settings": settings,
            }
        )

    register_reconcile_commands(app)
    register_trade_commands(app)
    return app


app = create_app()
