"""Command-line interface for repo-report."""

from __future__ import annotations

import functools
import logging

import click

from . import __version__
from .collector import collect_stats
from .errors import InvariantError, ReportError
from .fields import resolve_all
from .formats import (
    INFO_FORMATS,
    STATS_FORMATS,
    OutputFormat,
    check_format,
    parse_format,
    render_info,
    render_stats,
)
from .git import GitRepository
from .log import setup_logger
from .progress import make_progress

logger = logging.getLogger(__name__)

FATAL_EXIT = 128


def _fatal(ctx: click.Context, prefix: str, message: str) -> None:
    click.echo(f"{prefix}: {message}", err=True)
    ctx.exit(FATAL_EXIT)


def _report_errors(fn):
    """Turn repo-report exceptions into ``fatal:``/``BUG:`` exits."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()
        try:
            return fn(*args, **kwargs)
        except InvariantError as e:
            logger.debug("invariant violated", exc_info=True)
            _fatal(ctx, "BUG", str(e))
        except ReportError as e:
            _fatal(ctx, "fatal", str(e))

    return wrapper


_FORMAT_KEY = "repo_report.format"


def _select_format(ctx: click.Context, param: click.Parameter, value):
    """Record ``--format``/``-z`` in command-line order; the last one wins."""
    if param.name == "nul":
        if value:
            ctx.meta[_FORMAT_KEY] = OutputFormat.NUL
        return
    if value is None:
        return
    try:
        ctx.meta[_FORMAT_KEY] = parse_format(value)
    except ReportError as e:
        _fatal(ctx, "fatal", str(e))


def _selected_format(default: OutputFormat, allowed: frozenset[OutputFormat]) -> OutputFormat:
    fmt = click.get_current_context().meta.get(_FORMAT_KEY, default)
    return check_format(fmt, allowed)


@click.group()
@click.version_option(version=__version__, prog_name="repo-report")
@click.option(
    "-C",
    "--repo",
    "repo_path",
    envvar="REPO_REPORT_DIR",
    default=".",
    show_default=True,
    type=click.Path(file_okay=False),
    help="Repository to report on (or set REPO_REPORT_DIR).",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def main(ctx: click.Context, repo_path: str, verbose: bool) -> None:
    """Report layout and size information about a git repository."""
    setup_logger("repo_report", logging.DEBUG if verbose else logging.WARNING)
    ctx.obj = GitRepository(repo_path)


@main.command()
@click.option(
    "--format",
    default=None,
    metavar="FORMAT",
    expose_value=False,
    callback=_select_format,
    help="Output format: keyvalue or nul.",
)
@click.option("-z", "nul", is_flag=True, expose_value=False, callback=_select_format, help="Synonym for --format=nul.")
@click.argument("keys", nargs=-1)
@click.pass_obj
@_report_errors
def info(repo: GitRepository, keys: tuple[str, ...]) -> None:
    """Print the value of each KEY, such as layout.bare or object.format."""
    fmt = _selected_format(OutputFormat.KEYVALUE, INFO_FORMATS)

    pairs, errors = resolve_all(repo, keys)
    render_info(pairs, fmt)

    for error in errors:
        click.echo(f"error: {error}", err=True)
    if errors:
        click.get_current_context().exit(1)


@main.command()
@click.option(
    "--format",
    envvar="REPO_REPORT_FORMAT",
    default=None,
    metavar="FORMAT",
    expose_value=False,
    callback=_select_format,
    help="Output format: table (default), keyvalue or nul.",
)
@click.option("--progress/--no-progress", default=None, help="Show progress on stderr (default: when it is a terminal).")
@click.argument("extra", nargs=-1)
@click.pass_obj
@_report_errors
def stats(repo: GitRepository, progress: bool | None, extra: tuple[str, ...]) -> None:
    """Count references by kind and reachable objects by type."""
    if extra:
        raise click.UsageError("too many arguments")

    fmt = _selected_format(OutputFormat.TABLE, STATS_FORMATS)

    refs = repo.list_refs()
    report = collect_stats(refs, repo, lambda: make_progress(progress))
    render_stats(report, fmt)
