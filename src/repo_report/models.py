"""Data models for repo-report."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from rich.cells import cell_len


class RefKind(Enum):
    BRANCH = "branch"
    REMOTE = "remote"
    TAG = "tag"
    OTHER = "other"


class ObjectType(Enum):
    COMMIT = "commit"
    TREE = "tree"
    BLOB = "blob"
    TAG = "tag"


@dataclass(frozen=True)
class Ref:
    name: str
    objectname: str
    kind: RefKind


@dataclass
class ReferenceCounters:
    branches: int = 0
    remotes: int = 0
    tags: int = 0
    others: int = 0

    @property
    def total(self) -> int:
        return self.branches + self.remotes + self.tags + self.others


@dataclass
class ObjectCounters:
    tags: int = 0
    commits: int = 0
    trees: int = 0
    blobs: int = 0

    @property
    def total(self) -> int:
        return self.tags + self.commits + self.trees + self.blobs


@dataclass
class RepositoryStats:
    refs: ReferenceCounters = field(default_factory=ReferenceCounters)
    objects: ObjectCounters = field(default_factory=ObjectCounters)


@dataclass(frozen=True)
class TableRow:
    label: str
    value: str | None = None


@dataclass
class TableLayout:
    """Ordered rows of a two-column report plus the derived column widths."""

    label_title: str = "Repository stats"
    value_title: str = "Value"
    rows: list[TableRow] = field(default_factory=list)

    def add_header(self, label: str) -> None:
        self.rows.append(TableRow(label))

    def add_count(self, label: str, count: int) -> None:
        self.rows.append(TableRow(label, str(count)))

    @property
    def label_width(self) -> int:
        return max([cell_len(self.label_title)] + [cell_len(r.label) for r in self.rows])

    @property
    def value_width(self) -> int:
        return max(
            [cell_len(self.value_title)]
            + [cell_len(r.value) for r in self.rows if r.value is not None]
        )
