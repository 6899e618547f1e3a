"""Output format selection and dispatch."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from . import renderer
from .errors import InvalidFormatError, InvariantError, UnsupportedFormatError
from .models import RepositoryStats


class OutputFormat(Enum):
    TABLE = "table"
    KEYVALUE = "keyvalue"
    NUL = "nul"


INFO_FORMATS = frozenset({OutputFormat.KEYVALUE, OutputFormat.NUL})
STATS_FORMATS = frozenset(OutputFormat)


def parse_format(token: str) -> OutputFormat:
    try:
        return OutputFormat(token)
    except ValueError:
        raise InvalidFormatError(token) from None


def check_format(fmt: OutputFormat, allowed: frozenset[OutputFormat]) -> OutputFormat:
    if fmt not in allowed:
        raise UnsupportedFormatError()
    return fmt


def render_info(pairs: Iterable[tuple[str, str]], fmt: OutputFormat) -> None:
    if fmt is OutputFormat.KEYVALUE:
        renderer.render_info_keyvalue(pairs)
    elif fmt is OutputFormat.NUL:
        renderer.render_info_nul(pairs)
    else:
        raise InvariantError(f"not a valid output format: {fmt!r}")


def render_stats(stats: RepositoryStats, fmt: OutputFormat) -> None:
    if fmt is OutputFormat.TABLE:
        renderer.render_stats_table(stats)
    elif fmt is OutputFormat.KEYVALUE:
        renderer.render_stats_keyvalue(stats)
    elif fmt is OutputFormat.NUL:
        renderer.render_stats_nul(stats)
    else:
        raise InvariantError(f"invalid output format: {fmt!r}")
