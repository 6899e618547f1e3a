"""Static repository fields reported by ``repo-report info``."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum
from typing import Protocol

from .errors import UnknownKeyError

logger = logging.getLogger(__name__)


class LayoutSource(Protocol):
    """What a field needs to know about a repository."""

    def is_bare(self) -> bool: ...

    def is_shallow(self) -> bool: ...

    def object_format(self) -> str: ...

    def references_format(self) -> str: ...


def _bool(flag: bool) -> str:
    return "true" if flag else "false"


class Field(Enum):
    LAYOUT_BARE = "layout.bare"
    LAYOUT_SHALLOW = "layout.shallow"
    OBJECT_FORMAT = "object.format"
    REFERENCES_FORMAT = "references.format"

    @property
    def key(self) -> str:
        return self.value

    def value_for(self, repo: LayoutSource) -> str:
        """Return this field's value for ``repo`` as a string."""
        if self is Field.LAYOUT_BARE:
            return _bool(repo.is_bare())
        if self is Field.LAYOUT_SHALLOW:
            return _bool(repo.is_shallow())
        if self is Field.OBJECT_FORMAT:
            return repo.object_format()
        if self is Field.REFERENCES_FORMAT:
            return repo.references_format()
        raise AssertionError(f"unhandled field {self!r}")


# Sorted once here; callers never depend on declaration order.
FIELDS: dict[str, Field] = {f.key: f for f in sorted(Field, key=lambda f: f.key.encode())}


def lookup(key: str) -> Field | None:
    return FIELDS.get(key)


def resolve_all(
    repo: LayoutSource, keys: Iterable[str]
) -> tuple[list[tuple[str, str]], list[UnknownKeyError]]:
    """Resolve ``keys`` in order, collecting unknown keys instead of stopping.

    Returns the ``(key, value)`` pairs that resolved and one
    :class:`UnknownKeyError` per key that did not. Duplicates are kept.
    """
    resolved: list[tuple[str, str]] = []
    errors: list[UnknownKeyError] = []
    for key in keys:
        f = lookup(key)
        if f is None:
            logger.debug("unknown info key %r", key)
            errors.append(UnknownKeyError(key))
            continue
        resolved.append((key, f.value_for(repo)))
    return resolved, errors
