"""
Main CLI orchestrator combining all route tooling commands
"""

import logging

import click
from loguru import logger

from src.route.cli import route


class InterceptHandler(logging.Handler):
    """Redirect standard logging records to loguru"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss}  [<level>{level:<8}</level>]  {message}"


def configure_logging(verbose: bool = False, quiet: bool = False) -> str:
    """Send loguru output to stderr so stdout stays clean for JSON and CSV.

    Returns the loguru level in effect.
    """
    logger.remove()
    if verbose:
        log_level = "DEBUG"
    elif quiet:
        log_level = "WARNING"
    else:
        log_level = "INFO"

    logging_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(handlers=[InterceptHandler()], level=logging_level, force=True)
    if verbose:
        logging.getLogger("urllib3").setLevel(logging.DEBUG)
        logging.getLogger("requests").setLevel(logging.DEBUG)

    logger.add(
        lambda msg: click.echo(msg, err=True, nl=False),
        format=LOG_FORMAT,
        level=log_level,
        colorize=True,
    )
    return log_level


@click.group()
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose output (DEBUG level logging).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    help="Only log warnings and errors, e.g. when piping JSON or CSV output.",
)
@click.version_option(version="0.1.0", prog_name="tripgpx")
def cli(verbose: bool, quiet: bool):
    """tripgpx - GPX route tooling for the trip journal

    Compute route statistics and shrink day routes before they are committed.
    Logs go to stderr; command results go to stdout.
    """
    if verbose and quiet:
        raise click.UsageError("--verbose and --quiet cannot be used together")
    configure_logging(verbose=verbose, quiet=quiet)


cli.add_command(route)


if __name__ == "__main__":
    cli()
