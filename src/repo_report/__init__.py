"""repo-report: layout and size reports for git repositories."""

__version__ = "0.1.0"
