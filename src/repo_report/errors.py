"""Exception hierarchy for repo-report."""

from __future__ import annotations


class ReportError(Exception):
    """Base class for every error raised by repo-report."""


class InvalidFormatError(ReportError):
    def __init__(self, token: str) -> None:
        super().__init__(f"invalid format '{token}'")


class UnsupportedFormatError(ReportError):
    def __init__(self) -> None:
        super().__init__("unsupported output format")


class UnknownKeyError(ReportError):
    def __init__(self, key: str) -> None:
        super().__init__(f"key '{key}' not found")
        self.key = key


class InvariantError(ReportError):
    """A collaborator handed us something outside its contract."""


class GitCommandError(ReportError):
    def __init__(self, args: list[str], returncode: int, stderr: str = "") -> None:
        cmd = " ".join(args)
        msg = f"'{cmd}' exited with status {returncode}"
        if stderr.strip():
            msg += f": {stderr.strip()}"
        super().__init__(msg)
        self.returncode = returncode
        self.stderr = stderr
