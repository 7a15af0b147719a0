import json
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping, Optional
from starlette.requests import Request


def _frozen(mapping: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class RequestContext:
    """Read-only view of one call, handed from the dispatcher to a backend operation.

    ``user_id`` and ``session_token`` are only set by the auth gate, so
    contexts built for public routes never carry them.
    """

    method: str
    path_params: Mapping[str, str] = field(default_factory=dict)
    query: Mapping[str, str] = field(default_factory=dict)
    body: Any = field(default_factory=dict)
    user_id: Optional[str] = None
    session_token: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "path_params", _frozen(self.path_params))
        object.__setattr__(self, "query", _frozen(self.query))

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id and self.session_token)

    def authenticated(self, user_id: str, session_token: str) -> "RequestContext":
        return replace(self, user_id=user_id, session_token=session_token)

    @classmethod
    def from_request(cls, request: Request, path_params: Mapping[str, str], body: Any) -> "RequestContext":
        return cls(
            method=request.method,
            path_params=path_params,
            query=dict(request.query_params),
            body=body,
        )


async def read_json_body(request: Request) -> Any:
    """Parse a JSON body the way express.json does in strict mode.

    Non-JSON content types and empty bodies yield ``{}``. Malformed JSON and
    top-level scalars raise ``ValueError``.
    """
    content_type = request.headers.get("content-type", "")
    if "json" not in content_type:
        return {}

    raw = await request.body()
    if not raw.strip():
        return {}

    body = json.loads(raw)
    if not isinstance(body, (dict, list)):
        raise ValueError(f"JSON body must be an object or array, got {type(body).__name__}")
    return body
