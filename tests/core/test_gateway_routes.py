import pytest
import httpx
from httpx import ASGITransport
from asgi_lifespan import LifespanManager

from gateway.config.routes import build_route_table
from gateway.core.gateway_router import GatewayRouter
from gateway.core.path_router import PathRouter
from tests.fixtures.mock_backends import SpyBackend

AUTH = {"x-user-id": "u1", "x-session-token": "tok"}

PROTECTED = [
    ("GET", "/api/projects", "get_user_projects"),
    ("POST", "/api/projects", "create_project"),
    ("GET", "/api/projects/p1", "get_project"),
    ("DELETE", "/api/projects/p1", "delete_project"),
    ("POST", "/api/projects/p1/configure-backend", "configure_project_backend"),
    ("POST", "/api/projects/p1/test-backend", "test_project_backend"),
    ("GET", "/api/projects/p1/data", "get_project_data"),
    ("POST", "/api/projects/p1/data", "store_project_data"),
]


def build_gateway(backend, **kwargs):
    return GatewayRouter(build_route_table(backend), backend, **kwargs)


async def send(app, method, path, **kwargs):
    async with LifespanManager(app):
        async with httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            return await client.request(method, path, **kwargs)


@pytest.mark.anyio
@pytest.mark.parametrize("method,path,operation", PROTECTED)
@pytest.mark.parametrize("headers", [
    {},
    {"x-user-id": "u1"},
    {"x-session-token": "tok"},
    {"x-user-id": "", "x-session-token": "tok"},
])
async def test_protected_routes_reject_missing_credentials(method, path, operation, headers):
    backend = SpyBackend()
    res = await send(build_gateway(backend), method, path, headers=headers)

    assert res.status_code == 401
    assert res.json() == {"success": False, "message": "Authentication required"}
    assert backend.calls == []


@pytest.mark.anyio
@pytest.mark.parametrize("method,path,operation", PROTECTED)
async def test_protected_routes_reach_backend_with_identity(method, path, operation):
    backend = SpyBackend(results={operation: {"success": True, "op": operation}})
    res = await send(build_gateway(backend), method, path, headers=AUTH)

    assert res.status_code == 200
    assert res.json() == {"success": True, "op": operation}
    (args,) = backend.called(operation)
    assert args[0] == "u1"


@pytest.mark.anyio
@pytest.mark.parametrize("method,path", [
    ("GET", "/api/unknown"),
    ("PUT", "/api/projects"),
    ("PATCH", "/api/projects/p1"),
    ("GET", "/api/auth/register"),
    ("DELETE", "/api/projects"),
])
async def test_unregistered_route_returns_404(method, path):
    backend = SpyBackend()
    res = await send(build_gateway(backend), method, path, headers=AUTH)

    assert res.status_code == 404
    assert res.json() == {"success": False, "message": "Route not found"}
    assert backend.calls == []


@pytest.mark.anyio
async def test_health_is_public_and_forwarded_unchanged():
    backend = SpyBackend(results={"health_check": {"status": "ok"}})
    res = await send(build_gateway(backend), "GET", "/api/health")

    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


@pytest.mark.anyio
async def test_get_projects_passes_user_id():
    backend = SpyBackend(results={"get_user_projects": {"projects": [{"id": "p1"}]}})
    res = await send(build_gateway(backend), "GET", "/api/projects", headers=AUTH)

    assert res.status_code == 200
    assert res.json() == {"projects": [{"id": "p1"}]}
    assert backend.called("get_user_projects") == [("u1",)]


@pytest.mark.anyio
async def test_create_project_error_maps_to_500():
    backend = SpyBackend(results={"create_project": ValueError("name required")})
    res = await send(build_gateway(backend), "POST", "/api/projects", headers=AUTH, json={})

    assert res.status_code == 500
    assert res.json() == {"success": False, "message": "name required"}
    assert backend.called("create_project") == [("u1", {})]


@pytest.mark.anyio
async def test_register_error_maps_to_400():
    backend = SpyBackend(results={"register_user": ValueError("email taken")})
    res = await send(build_gateway(backend), "POST", "/api/auth/register", json={"email": "a@b.c"})

    assert res.status_code == 400
    assert res.json() == {"success": False, "message": "email taken"}


@pytest.mark.anyio
async def test_login_error_maps_to_401():
    backend = SpyBackend(results={"login_user": ValueError("bad credentials")})
    res = await send(build_gateway(backend), "POST", "/api/auth/login", json={"email": "a@b.c"})

    assert res.status_code == 401
    assert res.json() == {"success": False, "message": "bad credentials"}


@pytest.mark.anyio
async def test_public_route_context_never_carries_identity():
    backend = SpyBackend()
    res = await send(
        build_gateway(backend), "POST", "/api/auth/register",
        headers=AUTH, json={"email": "a@b.c"},
    )

    assert res.status_code == 200
    assert backend.called("register_user") == [({"email": "a@b.c"},)]


@pytest.mark.anyio
async def test_path_params_query_and_body_reach_backend():
    backend = SpyBackend()
    app = build_gateway(backend)

    await send(app, "GET", "/api/projects/p42/data", headers=AUTH, params={"table": "users", "limit": "5"})
    await send(app, "POST", "/api/projects/p42/data", headers=AUTH, json={"rows": [1, 2]})
    await send(app, "POST", "/api/projects/p42/configure-backend", headers=AUTH, json={"url": "libsql://x"})

    assert backend.called("get_project_data") == [("u1", "p42", {"table": "users", "limit": "5"})]
    assert backend.called("store_project_data") == [("u1", "p42", {"rows": [1, 2]})]
    assert backend.called("configure_project_backend") == [("u1", "p42", {"url": "libsql://x"})]


@pytest.mark.anyio
async def test_trailing_slash_matches_same_route():
    backend = SpyBackend(results={"get_user_projects": {"projects": []}})
    res = await send(build_gateway(backend), "GET", "/api/projects/", headers=AUTH)

    assert res.status_code == 200
    assert res.json() == {"projects": []}


@pytest.mark.anyio
@pytest.mark.parametrize("path,headers", [
    ("/api/auth/register", {}),
    ("/api/projects", {}),
    ("/api/projects", AUTH),
])
@pytest.mark.parametrize("raw", [b"{not json", b"null", b"42", b'"text"'])
async def test_unparseable_json_body_hits_catch_all(path, headers, raw):
    backend = SpyBackend()
    res = await send(
        build_gateway(backend), "POST", path,
        content=raw, headers={"content-type": "application/json", **headers},
    )

    assert res.status_code == 500
    assert res.json() == {"success": False, "message": "Internal server error"}
    assert backend.calls == []


@pytest.mark.anyio
async def test_unparseable_json_body_detail_in_development():
    backend = SpyBackend()
    res = await send(
        build_gateway(backend, expose_error_detail=True), "POST", "/api/auth/register",
        content=b"null", headers={"content-type": "application/json"},
    )

    body = res.json()
    assert res.status_code == 500
    assert body["message"] == "Internal server error"
    assert "object or array" in body["error"]


@pytest.mark.anyio
async def test_json_array_body_is_accepted():
    backend = SpyBackend()
    await send(build_gateway(backend), "POST", "/api/projects/p1/data", headers=AUTH, json=[{"row": 1}])

    assert backend.called("store_project_data") == [("u1", "p1", [{"row": 1}])]


@pytest.mark.anyio
async def test_head_is_served_by_get_routes():
    backend = SpyBackend(results={"health_check": {"status": "ok"}})
    app = build_gateway(backend)

    res = await send(app, "HEAD", "/api/health")
    assert res.status_code == 200
    assert backend.called("health_check") == [()]

    res = await send(app, "HEAD", "/api/projects/p1", headers=AUTH)
    assert res.status_code == 200
    assert backend.called("get_project") == [("u1", "p1")]

    res = await send(app, "HEAD", "/api/auth/login")
    assert res.status_code == 404


@pytest.mark.anyio
async def test_encoded_slash_stays_in_path_param():
    backend = SpyBackend()
    res = await send(build_gateway(backend), "GET", "/api/projects/a%2Fb", headers=AUTH)

    assert res.status_code == 200
    assert backend.called("get_project") == [("u1", "a/b")]


@pytest.mark.anyio
async def test_encoded_param_with_query_string():
    backend = SpyBackend()
    await send(
        build_gateway(backend), "GET", "/api/projects/my%20project/data",
        headers=AUTH, params={"table": "users"},
    )

    assert backend.called("get_project_data") == [("u1", "my project", {"table": "users"})]


@pytest.mark.anyio
async def test_non_json_body_is_treated_as_empty():
    backend = SpyBackend()
    await send(build_gateway(backend), "POST", "/api/auth/login", content=b"email=a")

    assert backend.called("login_user") == [({},)]


@pytest.mark.anyio
async def test_unserializable_result_hits_catch_all():
    backend = SpyBackend(results={"health_check": {"when": object()}})
    res = await send(build_gateway(backend), "GET", "/api/health")

    assert res.status_code == 500
    assert res.json() == {"success": False, "message": "Internal server error"}


@pytest.mark.anyio
async def test_catch_all_exposes_detail_in_development():
    backend = SpyBackend(results={"health_check": {"when": object()}})
    res = await send(build_gateway(backend, expose_error_detail=True), "GET", "/api/health")

    body = res.json()
    assert res.status_code == 500
    assert body["success"] is False
    assert body["message"] == "Internal server error"
    assert "error" in body and body["error"]


@pytest.mark.anyio
async def test_sync_backend_operation_is_supported():
    class SyncHealth(SpyBackend):
        def health_check(self):
            return {"status": "sync"}

    res = await send(build_gateway(SyncHealth()), "GET", "/api/health")

    assert res.json() == {"status": "sync"}


@pytest.mark.anyio
async def test_frontend_entry_document(tmp_path):
    index = tmp_path / "index.html"
    index.write_text("<html>ldss</html>")

    res = await send(build_gateway(SpyBackend(), frontend_index=str(index)), "GET", "/")
    assert res.status_code == 200
    assert "ldss" in res.text

    res = await send(build_gateway(SpyBackend(), frontend_index=str(tmp_path / "missing.html")), "GET", "/")
    assert res.status_code == 404


@pytest.mark.anyio
async def test_path_router_out_of_lockstep_with_table():
    backend = SpyBackend()
    path_router = PathRouter([("GET", "/api/health"), ("GET", "/api/extra")])
    res = await send(build_gateway(backend, path_router=path_router), "GET", "/api/extra", headers=AUTH)

    assert res.status_code == 500
    assert res.json() == {"success": False, "message": "Route not mapped: GET:/api/extra"}
    assert backend.calls == []
