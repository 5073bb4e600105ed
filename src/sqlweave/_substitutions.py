"""Named substitutions and the memoized identifier delimiter."""

from __future__ import annotations

import itertools
import re
import threading
from collections.abc import Callable, Iterator, Mapping, MutableMapping
from typing import Any

_SUBSTITUTION_RE = re.compile(r":([^:\s]*):")

_TOKENS = itertools.count()


class Substitutions(MutableMapping[str, Any]):
    """Name to identifier-or-value bindings used by ``:name:`` tokens.

    Unknown names resolve to ``:name:`` so the text is left untouched.
    Every mutation bumps ``version``, which identifies the snapshot that
    cached identifiers were computed against, together with ``token``,
    which is unique per instance.
    """

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(values or {})
        self.token = next(_TOKENS)
        self.version = 0

    @property
    def snapshot(self) -> tuple[int, int]:
        return (self.token, self.version)

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._values[name] = value
        self.version += 1

    def __delitem__(self, name: str) -> None:
        del self._values[name]
        self.version += 1

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Substitutions({self._values!r})"

    def resolve(self, name: str) -> Any:
        return self._values.get(name, f":{name}:")

    def substitute(self, value: str) -> str:
        """Replace every ``:name:`` inside *value*."""
        if ":" not in value:
            return value
        return _SUBSTITUTION_RE.sub(lambda m: str(self.resolve(m.group(1))), value)


class IdentifierCache:
    """Memo of delimited identifiers keyed by (name, substitution snapshot).

    Entries carry their snapshot in the key, so a context never reads an
    identifier computed against another map. Entries of older snapshots
    are dropped when a new snapshot is seen.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[int, int, str], str] = {}
        self._snapshot: tuple[int, int] | None = None
        self._lock = threading.Lock()

    def get(
        self,
        name: str,
        substitutions: Substitutions,
        delimite: Callable[[str], str],
    ) -> str:
        snapshot = substitutions.snapshot
        key = (*snapshot, name)
        with self._lock:
            if snapshot != self._snapshot:
                self._entries = {}
                self._snapshot = snapshot
            result = self._entries.get(key)
        if result is None:
            result = delimite(name)
            with self._lock:
                if snapshot == self._snapshot:
                    self._entries[key] = result
        return result

    def clear(self) -> None:
        with self._lock:
            self._entries = {}
            self._snapshot = None

    def __len__(self) -> int:
        return len(self._entries)
