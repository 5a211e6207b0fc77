from dataclasses import dataclass
from typing import Any, Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


@dataclass(frozen=True, kw_only=True)
class Span(Generic[K, V]):
    """A constant-valued piece ``[start, end)`` of an interval map.

    ``start=None`` extends the span down to -infinity and ``end=None`` up to
    +infinity.
    """

    start: K | None
    end: K | None
    value: V

    def __post_init__(self) -> None:
        if self.start is not None and self.end is not None:
            if not self.start < self.end:
                raise ValueError(
                    f"Span start ({self.start!r}) must be < end ({self.end!r})"
                )

    @property
    def bounded(self) -> bool:
        return self.start is not None and self.end is not None

    def __contains__(self, key: Any) -> bool:
        if self.start is not None and key < self.start:
            return False
        if self.end is not None and not key < self.end:
            return False
        return True

    def __str__(self) -> str:
        """Human-friendly string showing the half-open range and its value."""
        lo = "-inf" if self.start is None else repr(self.start)
        hi = "+inf" if self.end is None else repr(self.end)
        return f"Span([{lo}, {hi}) -> {self.value!r})"
