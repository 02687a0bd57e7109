"""storeqa CLI - command line interface for storeqa."""

from storeqa.cli.commands import cli


def main() -> None:
    """Main entry point for the storeqa CLI."""
    cli()


__all__ = ["main", "cli"]
