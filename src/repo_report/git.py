"""Thin wrapper around the ``git`` executable."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Iterable, Sequence

from .collector import ObjectSink
from .errors import GitCommandError, InvariantError, ReportError
from .models import ObjectType, Ref, RefKind

logger = logging.getLogger(__name__)

BATCH_SIZE = 1000
_BATCH_CHECK_FORMAT = "%(objectname) %(objecttype) %(rest)"

_REF_NAMESPACES = (
    ("refs/heads/", RefKind.BRANCH),
    ("refs/remotes/", RefKind.REMOTE),
    ("refs/tags/", RefKind.TAG),
)


def classify_ref(refname: str) -> RefKind:
    for prefix, kind in _REF_NAMESPACES:
        if refname.startswith(prefix):
            return kind
    return RefKind.OTHER


class GitRepository:
    """A git repository on disk, queried through ``git -C <path>``."""

    def __init__(self, path: str | os.PathLike[str] = ".", git: str = "git") -> None:
        self.path = os.fspath(path)
        self.git = git

    def _run(self, args: Sequence[str], input: str | None = None) -> str:
        cmd = [self.git, "-C", self.path, *args]
        logger.debug("running %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, input=input, capture_output=True, text=True)
        except OSError as e:
            raise ReportError(f"unable to run {self.git}: {e}") from e
        if result.returncode != 0:
            raise GitCommandError(cmd, result.returncode, result.stderr)
        return result.stdout

    def _rev_parse(self, flag: str) -> str:
        return self._run(["rev-parse", flag]).strip()

    # -- layout fields ------------------------------------------------------

    def is_bare(self) -> bool:
        return self._rev_parse("--is-bare-repository") == "true"

    def is_shallow(self) -> bool:
        return self._rev_parse("--is-shallow-repository") == "true"

    def object_format(self) -> str:
        return self._rev_parse("--show-object-format")

    def references_format(self) -> str:
        # rev-parse echoes options it does not know, so check the answer too.
        try:
            name = self._rev_parse("--show-ref-format")
        except GitCommandError:
            name = ""
        if name and not name.startswith("-"):
            return name
        try:
            configured = self._run(["config", "--get", "extensions.refstorage"]).strip()
        except GitCommandError as e:
            if e.returncode != 1:
                raise
            configured = ""
        return configured or "files"

    # -- references and objects --------------------------------------------

    def list_refs(self) -> list[Ref]:
        """Return every ref under ``refs/``, tagged with its kind."""
        out = self._run(["for-each-ref", "--format=%(objectname) %(refname)"])
        refs = []
        for line in out.splitlines():
            if not line:
                continue
            objectname, _, refname = line.partition(" ")
            refs.append(Ref(refname, objectname, classify_ref(refname)))
        logger.debug("listed %d refs", len(refs))
        return refs

    def walk_objects(self, roots: Sequence[str], sink: ObjectSink) -> None:
        """Report every object reachable from ``roots`` to ``sink``.

        ``rev-list --objects`` is piped straight into ``cat-file
        --batch-check`` and batches reach the sink while git is still
        walking. ``rev-list`` already yields each object once, so the
        batches never overlap.
        """
        if not roots:
            return
        rev_cmd = [self.git, "-C", self.path, "rev-list", "--objects", "--stdin"]
        cat_cmd = [self.git, "-C", self.path, "cat-file", f"--batch-check={_BATCH_CHECK_FORMAT}"]
        logger.debug("running %s | %s", " ".join(rev_cmd), " ".join(cat_cmd))

        try:
            rev_list = subprocess.Popen(
                rev_cmd, stdin=subprocess.PIPE, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True
            )
        except OSError as e:
            raise ReportError(f"unable to run {self.git}: {e}") from e
        try:
            cat_file = subprocess.Popen(
                cat_cmd, stdin=rev_list.stdout, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True
            )
        except OSError as e:
            rev_list.kill()
            rev_list.wait()
            raise ReportError(f"unable to run {self.git}: {e}") from e
        # cat-file owns the read end now, so rev-list gets SIGPIPE if cat-file dies.
        rev_list.stdout.close()

        try:
            try:
                rev_list.stdin.write("\n".join(roots) + "\n")
                rev_list.stdin.close()
            except BrokenPipeError:
                pass
            _stream_batches(cat_file.stdout, sink)
        except BaseException:
            cat_file.kill()
            rev_list.kill()
            raise
        finally:
            cat_file.stdout.close()
            cat_file.wait()
            rev_list.wait()

        if rev_list.returncode != 0:
            raise GitCommandError(rev_cmd, rev_list.returncode, rev_list.stderr.read())
        if cat_file.returncode != 0:
            raise GitCommandError(cat_cmd, cat_file.returncode, cat_file.stderr.read())


def _flush(sink: ObjectSink, key: tuple[str, str] | None, oids: list[str]) -> None:
    if not oids:
        return
    path, type_name = key
    try:
        obj_type = ObjectType(type_name)
    except ValueError:
        raise InvariantError(f"invalid object type '{type_name}'") from None
    sink.on_objects_at_path(path, obj_type, oids)


def _stream_batches(lines: Iterable[str], sink: ObjectSink) -> None:
    """Group consecutive ``cat-file`` lines by (path, type) and hand them on."""
    key: tuple[str, str] | None = None
    batch: list[str] = []
    for line in lines:
        line = line.rstrip("\n")
        if not line:
            continue
        oid, _, rest = line.partition(" ")
        type_name, _, path = rest.partition(" ")
        if type_name == "missing":
            raise ReportError(f"object {oid} is missing")
        if (path, type_name) != key or len(batch) >= BATCH_SIZE:
            _flush(sink, key, batch)
            key = (path, type_name)
            batch = []
        batch.append(oid)
    _flush(sink, key, batch)
