"""PUNCHCARD command line entry point.

Reads start-end times from the terminal and prints the hours worked,
rounded to the nearest quarter hour.
"""

import os
import sys

import typer
from loguru import logger

from punch_session import run_punchcard

DEFAULT_LOG_LEVEL = os.getenv("PUNCHCARD_LOG_LEVEL", "WARNING")

app = typer.Typer(
    name="punchcard",
    help="Total up worked hours and round them to the nearest quarter hour.",
    add_completion=False,
)


def _setup_logging(level=DEFAULT_LOG_LEVEL):
    """Send log records to stderr so stdout only carries the transcript"""
    logger.remove()
    logger.add(
        sys.stderr,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{file.name}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        level=level.upper(),
        colorize=True,
    )


@app.command()
def main():
    """Prompt for times until an identical start and end time is entered."""
    _setup_logging()

    # Undecodable bytes become U+FFFD and are reported as unreadable times
    if hasattr(sys.stdin, "reconfigure"):
        sys.stdin.reconfigure(errors="replace")

    try:
        days = run_punchcard(sys.stdin, typer.echo)
    except KeyboardInterrupt:
        typer.echo("")
        logger.debug("Interrupted")
        raise typer.Exit(code=0)

    logger.debug(f"Finished after {days} day(s)")


if __name__ == "__main__":
    app()
