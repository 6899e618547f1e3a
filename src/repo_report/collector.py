"""Reference and reachable-object counting."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Protocol

from .errors import InvariantError
from .models import ObjectCounters, ObjectType, Ref, RefKind, ReferenceCounters, RepositoryStats
from .progress import NullProgress, Progress

logger = logging.getLogger(__name__)

_REF_BUCKETS = {
    RefKind.BRANCH: "branches",
    RefKind.REMOTE: "remotes",
    RefKind.TAG: "tags",
    RefKind.OTHER: "others",
}

_OBJECT_BUCKETS = {
    ObjectType.COMMIT: "commits",
    ObjectType.TREE: "trees",
    ObjectType.BLOB: "blobs",
    ObjectType.TAG: "tags",
}


class ObjectSink(Protocol):
    def on_objects_at_path(self, path: str, type: ObjectType, oids: Sequence[str]) -> None: ...


class ObjectWalker(Protocol):
    """Reachable-object traversal.

    Every object reachable from ``roots`` must be reported to ``sink``
    exactly once, batched by the path it was found at.
    """

    def walk_objects(self, roots: Sequence[str], sink: ObjectSink) -> None: ...


def _check_ref_kind(ref: Ref) -> str:
    try:
        return _REF_BUCKETS[ref.kind]
    except KeyError:
        raise InvariantError(f"unexpected reference type {ref.kind!r} for {ref.name}") from None


def count_references(refs: Sequence[Ref], progress: Progress | None = None) -> ReferenceCounters:
    progress = progress or NullProgress()
    counters = ReferenceCounters()

    progress.start("Counting references", len(refs))
    try:
        for i, ref in enumerate(refs, 1):
            bucket = _check_ref_kind(ref)
            setattr(counters, bucket, getattr(counters, bucket) + 1)
            progress.update(i)
    finally:
        progress.stop()

    logger.debug("counted %d references", counters.total)
    return counters


class CountingSink:
    """Adds each batch reported by a walker into an :class:`ObjectCounters`."""

    def __init__(self, counters: ObjectCounters, progress: Progress) -> None:
        self.counters = counters
        self.progress = progress

    def on_objects_at_path(self, path: str, type: ObjectType, oids: Sequence[str]) -> None:
        try:
            bucket = _OBJECT_BUCKETS[type]
        except KeyError:
            raise InvariantError(f"invalid object type {type!r}") from None
        setattr(self.counters, bucket, getattr(self.counters, bucket) + len(oids))
        self.progress.update(self.counters.total)


def count_objects(
    refs: Sequence[Ref], walker: ObjectWalker, progress: Progress | None = None
) -> ObjectCounters:
    progress = progress or NullProgress()
    counters = ObjectCounters()

    roots = []
    for ref in refs:
        _check_ref_kind(ref)
        roots.append(ref.objectname)

    progress.start("Counting objects")
    try:
        walker.walk_objects(roots, CountingSink(counters, progress))
    finally:
        progress.stop()

    logger.debug("counted %d reachable objects from %d roots", counters.total, len(roots))
    return counters


def collect_stats(
    refs: Sequence[Ref],
    walker: ObjectWalker,
    progress_factory: Callable[[], Progress] = NullProgress,
) -> RepositoryStats:
    """Run both counting passes over ``refs`` and return the combined stats."""
    return RepositoryStats(
        refs=count_references(refs, progress_factory()),
        objects=count_objects(refs, walker, progress_factory()),
    )
