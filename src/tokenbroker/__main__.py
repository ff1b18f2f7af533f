"""Allow running the broker with ``python -m tokenbroker``."""

from .cli import cli

if __name__ == "__main__":
    cli()
