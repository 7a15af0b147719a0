from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Iterable, Iterator, Optional, Union
from .context import RequestContext
from .errors import DuplicateRouteError

Operation = Callable[[RequestContext], Union[Any, Awaitable[Any]]]


def route_key(method: str, pattern: str) -> str:
    return f"{method.upper()}:{pattern}"


@dataclass(frozen=True)
class RouteEntry:
    method: str
    pattern: str
    operation: Operation
    protected: bool = True
    # status used when the backend operation raises
    error_status: int = 500
    name: str = ""

    @property
    def key(self) -> str:
        return route_key(self.method, self.pattern)

    def describe(self) -> dict[str, Any]:
        return {
            "method": self.method.upper(),
            "path": self.pattern,
            "protected": self.protected,
            "operation": self.name or getattr(self.operation, "__name__", "operation"),
        }


class RouteTable:
    """Immutable ``"METHOD:pattern" -> RouteEntry`` registry, built once at startup."""

    def __init__(self, entries: Iterable[RouteEntry]):
        table: dict[str, RouteEntry] = {}
        for entry in entries:
            if entry.key in table:
                raise DuplicateRouteError(entry.key)
            table[entry.key] = entry
        self._entries = tuple(table.values())
        self._table = MappingProxyType(table)

    def get(self, method: str, pattern: str) -> Optional[RouteEntry]:
        return self._table.get(route_key(method, pattern))

    def __getitem__(self, key: str) -> RouteEntry:
        return self._table[key]

    def __contains__(self, key: object) -> bool:
        return key in self._table

    def __iter__(self) -> Iterator[RouteEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(self._table.keys())

    def describe(self) -> list[dict[str, Any]]:
        return [entry.describe() for entry in self._entries]
