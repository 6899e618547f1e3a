"""Tests for the git module."""

from __future__ import annotations

import io
import shutil
import subprocess
from unittest.mock import patch

import pytest

from repo_report.errors import GitCommandError, InvariantError, ReportError
from repo_report.git import GitRepository, classify_ref
from repo_report.models import ObjectType, RefKind

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def _completed(stdout="", returncode=0, stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class ListSink:
    def __init__(self):
        self.batches = []

    def on_objects_at_path(self, path, type, oids):
        self.batches.append((path, type, list(oids)))


@pytest.mark.parametrize(
    "refname, kind",
    [
        ("refs/heads/main", RefKind.BRANCH),
        ("refs/heads/feature/x", RefKind.BRANCH),
        ("refs/remotes/origin/HEAD", RefKind.REMOTE),
        ("refs/tags/v1.0", RefKind.TAG),
        ("refs/notes/commits", RefKind.OTHER),
        ("refs/stash", RefKind.OTHER),
        ("refs/headsup/x", RefKind.OTHER),
    ],
)
def test_classify_ref(refname, kind):
    assert classify_ref(refname) is kind


@patch("repo_report.git.subprocess.run")
def test_list_refs_parses_for_each_ref(mock_run):
    mock_run.return_value = _completed(
        "1111 refs/heads/main\n2222 refs/tags/v1\n3333 refs/remotes/origin/main\n4444 refs/stash\n"
    )
    refs = GitRepository("/repo").list_refs()
    assert [(r.name, r.objectname, r.kind) for r in refs] == [
        ("refs/heads/main", "1111", RefKind.BRANCH),
        ("refs/tags/v1", "2222", RefKind.TAG),
        ("refs/remotes/origin/main", "3333", RefKind.REMOTE),
        ("refs/stash", "4444", RefKind.OTHER),
    ]
    assert mock_run.call_args.args[0][:3] == ["git", "-C", "/repo"]


@patch("repo_report.git.subprocess.run")
def test_git_failure_raises(mock_run):
    mock_run.return_value = _completed(returncode=128, stderr="fatal: not a git repository\n")
    with pytest.raises(GitCommandError) as exc:
        GitRepository("/nowhere").list_refs()
    assert exc.value.returncode == 128
    assert "not a git repository" in str(exc.value)
    assert exc.value.stderr == "fatal: not a git repository\n"


@patch("repo_report.git.subprocess.run")
def test_missing_git_executable(mock_run):
    mock_run.side_effect = FileNotFoundError("git")
    with pytest.raises(ReportError):
        GitRepository().is_bare()


@patch("repo_report.git.subprocess.run")
def test_references_format_from_rev_parse(mock_run):
    mock_run.return_value = _completed("reftable\n")
    assert GitRepository().references_format() == "reftable"


@patch("repo_report.git.subprocess.run")
def test_references_format_falls_back_on_old_git(mock_run):
    # Older rev-parse echoes unknown options back; config has no refstorage.
    mock_run.side_effect = [_completed("--show-ref-format\n"), _completed(returncode=1)]
    assert GitRepository().references_format() == "files"


@patch("repo_report.git.subprocess.run")
def test_references_format_from_config(mock_run):
    mock_run.side_effect = [_completed(returncode=129), _completed("reftable\n")]
    assert GitRepository().references_format() == "reftable"


class _RecordingInput(io.StringIO):
    """stdin stand-in that keeps what was written after close()."""

    written = ""

    def close(self):
        self.written = self.getvalue()
        super().close()


class FakeProcess:
    def __init__(self, events, name, stdout="", returncode=0, stderr=""):
        self.events = events
        self.name = name
        self.stdin = _RecordingInput()
        self.stdout = io.StringIO(stdout)
        self.stderr = io.StringIO(stderr)
        self.returncode = None
        self._exit_status = returncode

    def wait(self):
        self.events.append(("wait", self.name))
        self.returncode = self._exit_status
        return self.returncode

    def kill(self):
        self.events.append(("kill", self.name))


class EventSink(ListSink):
    def __init__(self, events):
        super().__init__()
        self.events = events

    def on_objects_at_path(self, path, type, oids):
        self.events.append(("batch", path))
        super().on_objects_at_path(path, type, oids)


def _fake_pipeline(mock_popen, cat_output, rev_status=0, cat_status=0, rev_stderr=""):
    events = []
    rev_list = FakeProcess(events, "rev-list", returncode=rev_status, stderr=rev_stderr)
    cat_file = FakeProcess(events, "cat-file", stdout=cat_output, returncode=cat_status)
    mock_popen.side_effect = [rev_list, cat_file]
    return events, rev_list, cat_file


@patch("repo_report.git.subprocess.Popen")
def test_walk_objects_groups_consecutive_path_and_type(mock_popen):
    events, rev_list, cat_file = _fake_pipeline(
        mock_popen,
        "c1 commit \nc2 commit \nt1 tree \nb1 blob README\nb2 blob src/a.py\nt2 tree src\n",
    )
    sink = ListSink()
    GitRepository().walk_objects(["c1", "c2"], sink)
    assert sink.batches == [
        ("", ObjectType.COMMIT, ["c1", "c2"]),
        ("", ObjectType.TREE, ["t1"]),
        ("README", ObjectType.BLOB, ["b1"]),
        ("src/a.py", ObjectType.BLOB, ["b2"]),
        ("src", ObjectType.TREE, ["t2"]),
    ]
    assert rev_list.stdin.written == "c1\nc2\n"
    rev_args = mock_popen.call_args_list[0].args[0]
    cat_args = mock_popen.call_args_list[1].args[0]
    assert rev_args[3:] == ["rev-list", "--objects", "--stdin"]
    assert cat_args[3] == "cat-file"
    assert mock_popen.call_args_list[1].kwargs["stdin"] is rev_list.stdout


@patch("repo_report.git.subprocess.Popen")
def test_walk_objects_reports_before_git_exits(mock_popen):
    events, _, _ = _fake_pipeline(mock_popen, "c1 commit \nt1 tree \nb1 blob f\n")
    GitRepository().walk_objects(["c1"], EventSink(events))
    assert events == [
        ("batch", ""),
        ("batch", ""),
        ("batch", "f"),
        ("wait", "cat-file"),
        ("wait", "rev-list"),
    ]


@patch("repo_report.git.subprocess.Popen")
def test_walk_objects_caps_batch_size(mock_popen):
    lines = "".join(f"b{i} blob same/path\n" for i in range(5))
    _fake_pipeline(mock_popen, lines)
    sink = ListSink()
    with patch("repo_report.git.BATCH_SIZE", 2):
        GitRepository().walk_objects(["c1"], sink)
    assert [len(oids) for _, _, oids in sink.batches] == [2, 2, 1]


@patch("repo_report.git.subprocess.Popen")
def test_walk_objects_without_roots(mock_popen):
    sink = ListSink()
    GitRepository().walk_objects([], sink)
    assert sink.batches == []
    mock_popen.assert_not_called()


@patch("repo_report.git.subprocess.Popen")
def test_walk_objects_rev_list_failure(mock_popen):
    _fake_pipeline(mock_popen, "", rev_status=128, rev_stderr="fatal: bad object c1\n")
    with pytest.raises(GitCommandError) as exc:
        GitRepository().walk_objects(["c1"], ListSink())
    assert exc.value.returncode == 128
    assert "bad object c1" in exc.value.stderr


@patch("repo_report.git.subprocess.Popen")
def test_walk_objects_unknown_type(mock_popen):
    events, _, _ = _fake_pipeline(mock_popen, "x1 ofs-delta \n")
    with pytest.raises(InvariantError):
        GitRepository().walk_objects(["x1"], ListSink())
    assert ("kill", "cat-file") in events
    assert ("wait", "rev-list") in events


@patch("repo_report.git.subprocess.Popen")
def test_walk_objects_missing_object(mock_popen):
    _fake_pipeline(mock_popen, "x1 missing\n")
    with pytest.raises(ReportError):
        GitRepository().walk_objects(["x1"], ListSink())


@patch("repo_report.git.subprocess.Popen")
def test_walk_objects_missing_git_executable(mock_popen):
    mock_popen.side_effect = FileNotFoundError("git")
    with pytest.raises(ReportError):
        GitRepository().walk_objects(["c1"], ListSink())


@requires_git
def test_layout_of_working_repo(git_repo):
    repo = GitRepository(git_repo)
    assert repo.is_bare() is False
    assert repo.is_shallow() is False
    assert repo.object_format() in {"sha1", "sha256"}
    assert repo.references_format() in {"files", "reftable"}


@requires_git
def test_layout_of_bare_repo(bare_repo):
    assert GitRepository(bare_repo).is_bare() is True


@requires_git
def test_real_refs_and_objects(git_repo):
    repo = GitRepository(git_repo)
    refs = repo.list_refs()
    kinds = sorted(r.kind.value for r in refs)
    assert kinds == ["branch", "other", "remote", "tag"]

    sink = ListSink()
    repo.walk_objects([r.objectname for r in refs], sink)
    by_type = {}
    for _, obj_type, oids in sink.batches:
        by_type[obj_type] = by_type.get(obj_type, 0) + len(oids)
    assert by_type == {
        ObjectType.COMMIT: 1,
        ObjectType.TREE: 1,
        ObjectType.BLOB: 1,
        ObjectType.TAG: 1,
    }
