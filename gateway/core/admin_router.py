
import logging
from starlette.types import ASGIApp, Scope, Receive, Send
from starlette.responses import JSONResponse, Response
from gateway.core import envelope
from gateway.core.metrics import render_prometheus_metrics
from gateway.core.gateway_router import GatewayRouter

logger = logging.getLogger(__name__)

ADMIN_PREFIX = "/__"


class AdminRouter:
    def __init__(self, router: GatewayRouter) -> None:
        self.router = router

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        path = scope.get("path", "")
        method = scope.get("method", "GET")
        if method != "GET":
            await envelope.not_found()(scope, receive, send)
        elif path == "/__health":
            await self.health(scope, receive, send)
        elif path == "/__routes":
            await self.routes(scope, receive, send)
        elif path == "/__metrics":
            await self.metrics(scope, receive, send)
        else:
            await envelope.not_found()(scope, receive, send)

    async def health(self, scope: Scope, receive: Receive, send: Send) -> None:
        data = {"status": "ok", "routes": len(self.router.route_table)}
        await JSONResponse(data)(scope, receive, send)

    async def routes(self, scope: Scope, receive: Receive, send: Send) -> None:
        await JSONResponse(self.router.route_table.describe())(scope, receive, send)

    async def metrics(self, scope: Scope, receive: Receive, send: Send) -> None:
        data, content_type = render_prometheus_metrics()
        await Response(content=data, media_type=content_type)(scope, receive, send)


class MountAdminFirst:
    def __init__(self, admin_app: ASGIApp, main_app: ASGIApp, prefix: str = ADMIN_PREFIX) -> None:
        self.admin_app = admin_app
        self.main_app = main_app
        self.prefix = prefix

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["path"].startswith(self.prefix):
            logger.debug(f"Admin request: {scope['path']}")
            await self.admin_app(scope, receive, send)
        else:
            await self.main_app(scope, receive, send)
