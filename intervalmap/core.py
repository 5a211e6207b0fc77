"""Canonical interval map.

An ``IntervalMap`` associates every key of a totally ordered key space with a
value. It starts out mapping everything to a background value; ``assign``
overwrites half-open ranges ``[begin, end)``.

The map is stored as ``(key, value)`` breakpoints in a ``SortedKeyList``
ordered by key: a breakpoint ``k -> v`` means the value is ``v`` from ``k`` up
to the next breakpoint. Keys are only ever compared, so unhashable keys such as
lists work. The breakpoint collection is always canonical: no two neighbouring
breakpoints carry equal values and the lowest one differs from the background.
Two maps that agree on every key therefore have equal breakpoints.

Instances are not thread-safe. Callers sharing a map between threads must
serialize access themselves.
"""

import logging
from collections.abc import Iterator
from operator import itemgetter
from typing import Any, Generic, TypeVar

from sortedcontainers import SortedKeyList
from typing_extensions import override

from intervalmap.interval import Span

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


class IntervalMap(Generic[K, V]):
    def __init__(self, background: V) -> None:
        self._background: V = background
        self._breakpoints = SortedKeyList(key=itemgetter(0))  # of (K, V)

    @property
    def background(self) -> V:
        return self._background

    def get(self, key: K) -> V:
        """Return the value associated with ``key``."""
        idx = self._breakpoints.bisect_key_right(key)
        if idx == 0:
            return self._background
        return self._breakpoints[idx - 1][1]

    def _value_before(self, key: K) -> V:
        """Value holding immediately below ``key``, ignoring any breakpoint at ``key``."""
        idx = self._breakpoints.bisect_key_left(key)
        if idx == 0:
            return self._background
        return self._breakpoints[idx - 1][1]

    def assign(self, key_begin: K, key_end: K, value: V) -> bool:
        """Overwrite ``[key_begin, key_end)`` with ``value``.

        Keys outside the range keep their values. An empty or inverted range
        (``not key_begin < key_end``) is ignored and ``False`` is returned;
        zero-width ranges are ordinary input, not an error.

        Algorithm:
        - Read the value just below ``key_begin`` and the value at ``key_end``
          before touching anything.
        - Drop every breakpoint in ``[key_begin, key_end]``. A breakpoint at
          ``key_end`` goes too and is recreated below if still needed.
        - Store ``key_begin -> value`` unless the range merges with what
          precedes it, then store ``key_end -> previous value at key_end``
          unless what follows merges with the range.

        Returns:
            True if the range was non-empty and the assignment was applied
        """
        if not key_begin < key_end:
            logger.debug(
                "ignoring empty range [%r, %r) for value %r", key_begin, key_end, value
            )
            return False

        left = self._value_before(key_begin)
        right = self.get(key_end)

        self._erase(key_begin, key_end)
        self._store_unless_merged(key_begin, value, left)
        self._store_unless_merged(key_end, right, value)

        logger.debug(
            "assigned [%r, %r) -> %r, %d breakpoint(s)",
            key_begin,
            key_end,
            value,
            len(self._breakpoints),
        )
        return True

    def _erase(self, lo: K, hi: K) -> None:
        """Remove every breakpoint with ``lo <= key <= hi``."""
        first = self._breakpoints.bisect_key_left(lo)
        last = self._breakpoints.bisect_key_right(hi)
        del self._breakpoints[first:last]

    def _store_unless_merged(self, key: K, value: V, neighbor: V) -> bool:
        """Insert or replace breakpoint ``key -> value`` unless it would equal ``neighbor``.

        ``neighbor`` is the value on the other side of ``key``. When the two
        are equal the breakpoint would be redundant, so nothing is stored and
        any existing breakpoint at ``key`` is left alone.
        """
        if value == neighbor:
            return False
        idx = self._breakpoints.bisect_key_left(key)
        if idx < len(self._breakpoints) and not key < self._breakpoints[idx][0]:
            del self._breakpoints[idx]
        self._breakpoints.add((key, value))
        return True

    def fetch(self, start: K | None = None, end: K | None = None) -> Iterator[Span[K, V]]:
        """Yield the constant-valued spans covering ``[start, end)`` in key order.

        ``None`` bounds are unbounded. Background stretches are yielded too, so
        the spans tile the requested range and neighbouring spans always carry
        different values.
        """
        if start is not None and end is not None and not start < end:
            return

        if start is None:
            cursor, value, idx = None, self._background, 0
        else:
            cursor, value = start, self.get(start)
            idx = self._breakpoints.bisect_key_right(start)

        for key, next_value in self._breakpoints.islice(idx):
            if end is not None and not key < end:
                break
            yield Span(start=cursor, end=key, value=value)
            cursor, value = key, next_value

        yield Span(start=cursor, end=end, value=value)

    def breakpoints(self) -> list[tuple[K, V]]:
        """Snapshot of the stored ``(key, value)`` breakpoints in key order."""
        return list(self._breakpoints)

    def copy(self) -> "IntervalMap[K, V]":
        clone: IntervalMap[K, V] = IntervalMap(self._background)
        clone._breakpoints = self._breakpoints.copy()
        return clone

    def __getitem__(self, item: Any) -> Any:
        if isinstance(item, slice):
            self._check_step(item)
            return self.fetch(item.start, item.stop)
        return self.get(item)

    def __setitem__(self, item: slice, value: V) -> None:
        if not isinstance(item, slice):
            raise TypeError(
                f"IntervalMap assignment requires a slice, got {type(item).__name__!r}.\n"
                f"Hint: assign a half-open range instead:\n"
                f"  m[begin:end] = value\n"
                f"  m.assign(begin, end, value)"
            )
        self._check_step(item)
        if item.start is None or item.stop is None:
            raise TypeError(
                f"IntervalMap assignment needs both bounds, got "
                f"start={item.start!r}, stop={item.stop!r}.\n"
                f"Unbounded ranges are not supported; the background value already "
                f"covers everything outside the assigned ranges."
            )
        self.assign(item.start, item.stop, value)

    @staticmethod
    def _check_step(item: slice) -> None:
        if item.step is not None and item.step != 1:
            raise ValueError(f"Step must be 1: {item.step}")

    def __iter__(self) -> Iterator[Span[K, V]]:
        return self.fetch()

    def __len__(self) -> int:
        return len(self._breakpoints)

    @override
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IntervalMap):
            return NotImplemented
        return (
            self._background == other._background
            and self._breakpoints == other._breakpoints
        )

    __hash__ = None  # type: ignore[assignment]

    @override
    def __repr__(self) -> str:
        body = ", ".join(f"{k!r}: {v!r}" for k, v in self._breakpoints)
        return f"IntervalMap({self._background!r}, {{{body}}})"


def interval_map(background: V, *spans: Span[Any, V]) -> IntervalMap[Any, V]:
    """Create an interval map and assign the given spans in order.

    Later spans overwrite earlier ones where they overlap.

    Example:
        >>> from intervalmap import Span, interval_map
        >>> m = interval_map(
        ...     "A",
        ...     Span(start=700, end=800, value="B"),
        ...     Span(start=100, end=200, value="S"),
        ... )
        >>> m[150], m[750], m[800]
        ('S', 'B', 'A')
    """
    result: IntervalMap[Any, V] = IntervalMap(background)
    for span in spans:
        if not span.bounded:
            raise ValueError(
                f"interval_map() needs bounded spans, got {span}.\n"
                f"Keys outside every span already map to the background value "
                f"({background!r})."
            )
        result.assign(span.start, span.end, span.value)
    return result
