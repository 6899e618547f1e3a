"""Plain-text renderers for info fields and repository stats."""

from __future__ import annotations

import sys
from collections.abc import Iterable

from rich.cells import cell_len

from .models import RepositoryStats, TableLayout

_C_ESCAPES = {
    0x07: "\\a",
    0x08: "\\b",
    0x09: "\\t",
    0x0A: "\\n",
    0x0B: "\\v",
    0x0C: "\\f",
    0x0D: "\\r",
    0x22: '\\"',
    0x5C: "\\\\",
}


def _needs_quote(byte: int) -> bool:
    return byte < 0x20 or byte == 0x7F or byte >= 0x80 or byte in (0x22, 0x5C)


def quote_c_style(value: str) -> str:
    """Quote ``value`` the way git quotes paths, or return it unchanged.

    Non-ASCII bytes are written as octal escapes of their UTF-8 encoding.
    """
    raw = value.encode("utf-8", "surrogateescape")
    if not any(_needs_quote(b) for b in raw):
        return value

    out = ['"']
    for b in raw:
        if b in _C_ESCAPES:
            out.append(_C_ESCAPES[b])
        elif _needs_quote(b):
            out.append(f"\\{b:03o}")
        else:
            out.append(chr(b))
    out.append('"')
    return "".join(out)


def _write(content: str) -> None:
    sys.stdout.write(content)
    sys.stdout.flush()


def _pad(text: str, width: int, right: bool = False) -> str:
    fill = " " * max(width - cell_len(text), 0)
    return fill + text if right else text + fill


# -- info ------------------------------------------------------------------


def format_info_keyvalue(pairs: Iterable[tuple[str, str]]) -> str:
    return "".join(f"{key}={quote_c_style(value)}\n" for key, value in pairs)


def format_info_nul(pairs: Iterable[tuple[str, str]]) -> str:
    return "".join(f"{key}\n{value}\0" for key, value in pairs)


def render_info_keyvalue(pairs: Iterable[tuple[str, str]]) -> None:
    _write(format_info_keyvalue(pairs))


def render_info_nul(pairs: Iterable[tuple[str, str]]) -> None:
    _write(format_info_nul(pairs))


# -- stats: table ----------------------------------------------------------


def build_stats_table(stats: RepositoryStats) -> TableLayout:
    """Lay out ``stats`` as the two-section table shown by ``stats``."""
    refs = stats.refs
    objects = stats.objects
    table = TableLayout()

    table.add_header("* References")
    table.add_count("  * Count", refs.total)
    table.add_count("    * Branches", refs.branches)
    table.add_count("    * Tags", refs.tags)
    table.add_count("    * Remotes", refs.remotes)
    table.add_count("    * Others", refs.others)

    table.add_header("")
    table.add_header("* Reachable objects")
    table.add_count("  * Count", objects.total)
    table.add_count("    * Commits", objects.commits)
    table.add_count("    * Trees", objects.trees)
    table.add_count("    * Blobs", objects.blobs)
    table.add_count("    * Tags", objects.tags)

    return table


def format_table(table: TableLayout) -> str:
    label_width = table.label_width
    value_width = table.value_width

    lines = [
        f"| {_pad(table.label_title, label_width)} | {_pad(table.value_title, value_width)} |",
        f"| {'-' * label_width} | {'-' * value_width} |",
    ]
    for row in table.rows:
        value = row.value if row.value is not None else ""
        lines.append(f"| {_pad(row.label, label_width)} | {_pad(value, value_width, right=True)} |")
    return "\n".join(lines) + "\n"


def render_stats_table(stats: RepositoryStats) -> None:
    _write(format_table(build_stats_table(stats)))


# -- stats: keyvalue / nul -------------------------------------------------


def format_stats_keyvalue(stats: RepositoryStats, key_delim: str, value_delim: str) -> str:
    """Format the eight leaf counters; totals are left to the table form."""
    refs = stats.refs
    objects = stats.objects
    entries = [
        ("references.branches.count", refs.branches),
        ("references.tags.count", refs.tags),
        ("references.remotes.count", refs.remotes),
        ("references.others.count", refs.others),
        ("objects.commits.count", objects.commits),
        ("objects.trees.count", objects.trees),
        ("objects.blobs.count", objects.blobs),
        ("objects.tags.count", objects.tags),
    ]
    return "".join(f"{key}{key_delim}{count}{value_delim}" for key, count in entries)


def render_stats_keyvalue(stats: RepositoryStats) -> None:
    _write(format_stats_keyvalue(stats, "=", "\n"))


def render_stats_nul(stats: RepositoryStats) -> None:
    _write(format_stats_keyvalue(stats, "\n", "\0"))
