import re
from dataclasses import dataclass, field
from typing import Iterable, Optional
from urllib.parse import unquote
from starlette.types import Scope

PLACEHOLDER = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


@dataclass(frozen=True)
class PathMatch:
    method: str
    pattern: str
    params: dict[str, str] = field(default_factory=dict)


def compile_pattern(pattern: str) -> re.Pattern:
    regex = ""
    last = 0
    for m in PLACEHOLDER.finditer(pattern):
        regex += re.escape(pattern[last:m.start()])
        regex += f"(?P<{m.group(1)}>[^/]+)"
        last = m.end()
    regex += re.escape(pattern[last:])
    return re.compile(f"^{regex}$")


def normalize_path(path: str) -> str:
    if len(path) > 1:
        return path.rstrip("/") or "/"
    return path or "/"


def raw_request_path(scope: Scope) -> str:
    """Undecoded request path, so an encoded ``/`` stays inside its segment."""
    raw = scope.get("raw_path")
    if not raw:
        return scope["path"]
    # some servers leave the query string on raw_path
    return raw.split(b"?", 1)[0].decode("latin-1")


class PathRouter:
    """Resolves a raw request path to one of the declared ``:name`` patterns.

    HEAD is answered by GET routes. Captured params are percent-decoded.
    """

    def __init__(self, routes: Iterable[tuple[str, str]]):
        self.routes = [
            (method.upper(), pattern, compile_pattern(pattern))
            for method, pattern in routes
        ]

    def match(self, method: str, path: str) -> Optional[PathMatch]:
        method = method.upper()
        if method == "HEAD":
            method = "GET"
        path = normalize_path(path)
        for route_method, pattern, regex in self.routes:
            if route_method != method:
                continue
            m = regex.match(path)
            if m:
                params = {name: unquote(value) for name, value in m.groupdict().items()}
                return PathMatch(method, pattern, params)
        return None
