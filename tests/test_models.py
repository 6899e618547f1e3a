"""Tests for the models module."""

from __future__ import annotations

from repo_report.models import ObjectCounters, ReferenceCounters, RepositoryStats, TableLayout


def test_counters_start_at_zero():
    stats = RepositoryStats()
    assert stats.refs.total == 0
    assert stats.objects.total == 0


def test_reference_total_is_sum():
    refs = ReferenceCounters(branches=3, remotes=4, tags=2, others=1)
    assert refs.total == 10
    refs.tags += 5
    assert refs.total == 15


def test_object_total_is_sum():
    objects = ObjectCounters(tags=1, commits=2, trees=3, blobs=4)
    assert objects.total == 10


def test_layout_widths_fit_headers_when_rows_are_narrow():
    table = TableLayout()
    table.add_header("*")
    table.add_count("x", 1)
    assert table.label_width == len("Repository stats")
    assert table.value_width == len("Value")


def test_layout_widths_follow_widest_row():
    table = TableLayout()
    table.add_count("    * A rather long row label", 123456789)
    assert table.label_width == len("    * A rather long row label")
    assert table.value_width == 9


def test_header_rows_have_no_value():
    table = TableLayout()
    table.add_header("* References")
    assert table.rows[0].value is None
