"""Handle classification for the encoder.

The encoder knows nothing about remote objects. Before it looks at a value
it asks a caller-supplied classifier whether the value should travel as a
handle (an integer index into a table the other side resolves) or be
encoded structurally.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol


@dataclass(frozen=True, slots=True)
class Handle:
    """Classifier verdict: encode the value as {"h": index}."""

    index: int


@dataclass(frozen=True, slots=True)
class Passthrough:
    """Classifier verdict: encode ``value`` structurally.

    ``value`` may differ from what was classified, letting the classifier
    unwrap proxies before the encoder inspects them.
    """

    value: Any


Classification = Handle | Passthrough


class Classifier(Protocol):
    """Decides, per value, whether to substitute a handle reference.

    Must not mutate the value it is given. Exceptions it raises propagate
    unchanged out of ``encode``.
    """

    def __call__(self, value: Any, /) -> Classification:
        ...


def passthrough(value: Any) -> Classification:
    """Classifier that never reports a handle."""
    return Passthrough(value)


class HandleCollector:
    """Classifier that turns matching values into sequential handles.

    The collected values form the handle table for the receiving side:
    ``decode(encode(x, collector), collector.handles)`` yields the original
    objects back in the handle positions. The same object (by identity)
    always gets the same index.

    Example:
        >>> collector = HandleCollector(types=(Connection,))
        >>> encode({"conn": conn}, collector)
        {"o": {"conn": {"h": 0}}}
        >>> collector.handles
        [conn]
    """

    __slots__ = ("handles", "_predicate", "_index_by_id")

    def __init__(
        self,
        predicate: Callable[[Any], bool] | None = None,
        *,
        types: tuple[type, ...] = (),
    ) -> None:
        if predicate is None and not types:
            raise ValueError("HandleCollector needs a predicate or types")
        self.handles: list[Any] = []
        self._index_by_id: dict[int, int] = {}

        def matches(value: Any) -> bool:
            if types and isinstance(value, types):
                return True
            return predicate is not None and predicate(value)

        self._predicate: Callable[[Any], bool] = matches

    def __call__(self, value: Any) -> Classification:
        if not self._predicate(value):
            return Passthrough(value)

        # handles keeps every collected object alive, so ids stay unique
        index = self._index_by_id.get(id(value))
        if index is None:
            index = len(self.handles)
            self.handles.append(value)
            self._index_by_id[id(value)] = index
        return Handle(index)

    def __len__(self) -> int:
        return len(self.handles)
