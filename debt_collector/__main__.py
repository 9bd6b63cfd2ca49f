"""Entry point for ``python -m debt_collector``."""

from .cli.main import cli

if __name__ == "__main__":
    cli()
