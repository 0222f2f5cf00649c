"""Parser for the hosting configurations file.

The file holds ``key=value`` pairs separated by commas or semicolons::

    ArmRetryAfterSeconds=20;TelemetryIntervalMinutes=5,GetLatestDeploymentOptimized=0

Parsing is deliberately permissive. Fragments that do not split into exactly
one key and one value are dropped without error, so a truncated or garbled
file degrades to whatever pairs survive.
"""

import re
from collections.abc import Iterator, Mapping
from typing import Optional

_ENTRY_SEPARATORS = re.compile(r"[,;]")
_PAIR_SEPARATOR = "="


class Snapshot(Mapping):
    """Immutable mapping with case-insensitive string keys.

    The casing of the last occurrence of each key is kept for iteration.
    """

    __slots__ = ("_items",)

    def __init__(self, pairs=()):
        items: dict[str, tuple[str, str]] = {}
        source = pairs.items() if isinstance(pairs, Mapping) else pairs
        for key, value in source:
            folded = key.casefold()
            # Re-insert so iteration order follows the last occurrence
            items.pop(folded, None)
            items[folded] = (key, value)
        self._items = items

    def __getitem__(self, key: str) -> str:
        return self._items[key.casefold()][1]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.casefold() in self._items

    def __iter__(self) -> Iterator[str]:
        return (key for key, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def _folded(self) -> dict[str, str]:
        return {folded: value for folded, (_, value) in self._items.items()}

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Snapshot):
            return self._folded() == other._folded()
        if isinstance(other, Mapping):
            if len(other) != len(self) or not all(isinstance(k, str) for k in other):
                return False
            return self._folded() == {k.casefold(): v for k, v in other.items()}
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._folded().items()))

    def __repr__(self) -> str:
        return f"Snapshot({dict(self.items())!r})"


EMPTY_SNAPSHOT = Snapshot()


def split_pair(entry: str) -> Optional[tuple[str, str]]:
    """Split one entry into (key, value), or None if it is malformed.

    Every ``=`` separates a part and empty parts are discarded, so
    ``a==1`` yields ``("a", "1")`` while ``a=1=2`` and ``b`` yield None.
    """
    parts = [part for part in entry.split(_PAIR_SEPARATOR) if part]
    if len(parts) != 2:
        return None
    return parts[0], parts[1]


def iter_pairs(text: Optional[str]) -> Iterator[tuple[str, str]]:
    """Yield the well-formed pairs of text in file order."""
    if not text:
        return
    for entry in _ENTRY_SEPARATORS.split(text):
        if not entry:
            continue
        pair = split_pair(entry)
        if pair is not None:
            yield pair


def parse(text: Optional[str]) -> Snapshot:
    """Parse hosting configurations text into a snapshot.

    Empty or None text yields an empty snapshot. Duplicate keys (compared
    case-insensitively) resolve to the later entry.
    """
    if not text:
        return EMPTY_SNAPSHOT
    return Snapshot(iter_pairs(text))
