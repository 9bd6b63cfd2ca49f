"""Command line interface for the debt collector."""

import asyncio
import sys
from pathlib import Path

import click

from .. import __version__
from ..collector_logging import setup_logging
from ..config.loader import load_config
from ..pipeline import build_pipeline_from_config
from ..reporting import write_report
from ..scanner import RepositoryNotFoundError
from ..scoring import RiskScorer
from .errors import (
    ConfigurationError,
    ReportWriteError,
    RepositoryPathError,
    ValidationError,
    handle_exception,
)
from .output import OutputConfig, OutputManager


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Tech Debt Collector - scan and analyze technical debt in your codebase."""


@cli.command()
@click.argument("path", type=click.Path(file_okay=False), default=".")
@click.option(
    "--output", "-o", "output_path", help="Report file path (default: report.json)"
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    help="Report format (default: json)",
)
@click.option("--llm/--no-llm", "enable_llm", default=None, help="Enable AI enrichment")
@click.option("--openai-key", envvar="OPENAI_API_KEY", help="OpenAI API key")
@click.option(
    "--openai-model", "chat_model", help="OpenAI chat model (default: gpt-3.5-turbo)"
)
@click.option(
    "--embedding-provider",
    type=click.Choice(["openai", "hashing"]),
    help="Embedding provider for similarity search",
)
@click.option(
    "--top-n", "enrich_limit", type=int, help="Items to enrich (default: 10)"
)
@click.option(
    "--concurrency", "max_concurrency", type=int, help="Items enriched in parallel"
)
@click.option(
    "--delay", "request_delay_seconds", type=float, help="Seconds between requests"
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    help="Settings file (default: PATH/.debt-collector.txt)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.option("--quiet", "-q", is_flag=True, help="Only show errors and the summary")
@click.option(
    "--log-format", type=click.Choice(["text", "json"]), help="Log output format"
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    help="Also write debug logs to this file (rotated)",
)
@click.option("--no-color", is_flag=True, help="Disable colored output")
def scan(
    path,
    output_path,
    output_format,
    enable_llm,
    openai_key,
    chat_model,
    embedding_provider,
    enrich_limit,
    max_concurrency,
    request_delay_seconds,
    config_file,
    verbose,
    quiet,
    log_format,
    log_file,
    no_color,
):
    """Scan PATH for TODO/FIXME/HACK/DEPRECATED/XXX markers and write a report."""
    output = OutputManager(
        OutputConfig.from_flags(verbose=verbose, quiet=quiet, no_color=no_color)
    )

    try:
        if quiet and verbose:
            raise ValidationError("--quiet and --verbose are mutually exclusive")

        repo_path = Path(path)
        if not repo_path.is_dir():
            raise RepositoryPathError(str(repo_path))

        try:
            config = load_config(
                Path(config_file) if config_file else repo_path,
                output_path=output_path,
                output_format=output_format,
                enable_llm=enable_llm,
                openai_api_key=openai_key,
                chat_model=chat_model,
                embedding_provider=embedding_provider,
                enrich_limit=enrich_limit,
                max_concurrency=max_concurrency,
                request_delay_seconds=request_delay_seconds,
                log_format=log_format,
                verbose=verbose or None,
            )
        except OSError as e:
            raise ConfigurationError(str(e), config_file=config_file) from e

        setup_logging(
            quiet=quiet,
            verbose=config.verbose,
            log_file=Path(log_file) if log_file else None,
            log_format=config.log_format,
        )

        output.info(f"Scanning repository: {repo_path}")
        pipeline = build_pipeline_from_config(config)
        try:
            report = asyncio.run(pipeline.run(repo_path))
        except RepositoryNotFoundError as e:
            raise RepositoryPathError(e.path) from e

        try:
            written = write_report(report, config.output_path, config.output_format)
        except OSError as e:
            raise ReportWriteError(config.output_path, str(e)) from e

        output.plain("")
        output.success("Analysis Complete!", force=True)
        output.risk_summary(
            report.total_items,
            report.critical_items,
            report.high_items,
            report.medium_items,
            report.low_items,
        )
        if report.errors:
            output.warning(
                f"{len(report.errors)} files or items could not be processed"
            )
        output.plain(f"Report saved to: {written}", force=True)

    except Exception as e:
        message, exit_code = handle_exception(
            e, use_color=output.config.use_color, verbose=verbose
        )
        output.error(message)
        sys.exit(exit_code)


@cli.command()
@click.argument("severity", type=click.IntRange(1, 5))
@click.argument("importance", type=click.IntRange(1, 5))
@click.argument("frequency", type=click.IntRange(1, 5))
def score(severity, importance, frequency):
    """Compute the risk score for SEVERITY, IMPORTANCE and FREQUENCY (each 1-5)."""
    scorer = RiskScorer()
    risk = scorer.score(severity, importance, frequency)
    line = f"Risk: {risk:.1f}/100 ({scorer.categorize(risk).value})"
    if scorer.is_critical(risk):
        line += " CRITICAL"
    click.echo(line)


if __name__ == "__main__":
    cli()
