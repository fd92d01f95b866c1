"""Allow ``python -m fylex``."""

from fylex.cli import cli


if __name__ == "__main__":
    cli()
