"""Main entry point for beatsampler."""

from beatsampler.cli.main import cli

if __name__ == "__main__":
    cli()
