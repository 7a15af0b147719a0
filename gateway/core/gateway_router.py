import os
import time
import logging
from typing import Optional
from starlette.requests import Request
from starlette.responses import FileResponse, PlainTextResponse, Response
from starlette.types import Scope, Receive, Send
from . import envelope
from .auth import AuthGate
from .backend import Backend
from .context import RequestContext, read_json_body
from .dispatcher import Dispatcher
from .errors import AuthRequired, GatewayError
from .metrics import ACTIVE_REQUESTS, BACKEND_ERRORS, REQUEST_COUNT, REQUEST_DURATION
from .path_router import PathRouter, raw_request_path
from .route_table import RouteTable, route_key

logger = logging.getLogger(__name__)

UNMATCHED = "unmatched"


class GatewayRouter:
    def __init__(
        self,
        route_table: RouteTable,
        backend: Backend,
        auth_gate: Optional[AuthGate] = None,
        path_router: Optional[PathRouter] = None,
        expose_error_detail: bool = False,
        frontend_index: Optional[str] = None,
    ):
        self.route_table = route_table
        self.backend = backend
        self.auth_gate = auth_gate or AuthGate()
        self.path_router = path_router or PathRouter(
            (entry.method, entry.pattern) for entry in route_table
        )
        self.dispatcher = Dispatcher(route_table)
        self.expose_error_detail = expose_error_detail
        self.frontend_index = frontend_index

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        if scope["type"] != "http":
            await PlainTextResponse("Unsupported", status_code=400)(scope, receive, send)
            return

        await self._handle_http(scope, receive, send)

    async def _handle_http(self, scope: Scope, receive: Receive, send: Send):
        method = scope["method"]
        path = scope["path"]
        route = UNMATCHED
        start = time.perf_counter()

        ACTIVE_REQUESTS.inc()
        try:
            route, response = await self._respond(Request(scope, receive))
        except Exception as e:
            # nothing escapes past the HTTP layer
            logger.exception(f"Unhandled error on {method} {path}: {e}")
            detail = str(e) if self.expose_error_detail else None
            response = envelope.internal_error(detail)
        finally:
            ACTIVE_REQUESTS.dec()

        REQUEST_COUNT.labels(method=method, route=route, status=str(response.status_code)).inc()
        REQUEST_DURATION.labels(route=route).observe(time.perf_counter() - start)
        await response(scope, receive, send)

    async def _respond(self, request: Request) -> tuple[str, Response]:
        method = request.method
        path = raw_request_path(request.scope)

        # body parsing runs ahead of routing; failures belong to the catch-all
        body = await read_json_body(request)

        if method in ("GET", "HEAD") and path == "/" and self.frontend_index:
            return "/", self._frontend()

        match = self.path_router.match(method, path)
        if match is None:
            logger.warning(f"404: {method} {path}")
            return UNMATCHED, envelope.not_found()

        key = route_key(match.method, match.pattern)
        entry = self.route_table.get(match.method, match.pattern)

        try:
            context = RequestContext.from_request(request, match.params, body)
            if entry is not None and entry.protected:
                context = await self.auth_gate.authenticate(request.headers, context, route=key)
            result = await self.dispatcher.dispatch(match.method, match.pattern, context)
        except AuthRequired as e:
            return match.pattern, envelope.failure(e.message, e.status_code)
        except GatewayError as e:
            logger.error(f"{key} failed: {e.message}")
            return match.pattern, envelope.failure(e.message, e.status_code)
        except Exception as e:
            logger.error(f"{key} operation error: {e}", exc_info=True)
            BACKEND_ERRORS.labels(route=match.pattern).inc()
            status = entry.error_status if entry is not None else 500
            return match.pattern, envelope.failure(str(e) or e.__class__.__name__, status)

        return match.pattern, envelope.success(result)

    def _frontend(self) -> Response:
        if not os.path.isfile(self.frontend_index):
            logger.warning(f"Frontend entry document missing: {self.frontend_index}")
            return envelope.not_found()
        logger.info("Serving frontend")
        return FileResponse(self.frontend_index, media_type="text/html")

    async def _handle_lifespan(self, scope: Scope, receive: Receive, send: Send):
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                logger.info("[gateway] Initializing backend...")
                try:
                    await self.backend.init()
                except Exception as e:
                    logger.exception(f"[gateway] Backend initialization failed: {e}")
                    await send({"type": "lifespan.startup.failed", "message": str(e)})
                    return
                logger.info(f"[gateway] Backend ready, {len(self.route_table)} routes mapped")
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await self._close()
                logger.info("[gateway] Shutdown complete. All resources closed.")
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def _close(self):
        for resource in (self.backend, self.auth_gate.verifier):
            aclose = getattr(resource, "aclose", None)
            if aclose is None:
                continue
            try:
                await aclose()
            except Exception as e:
                logger.warning(f"[gateway] Error while closing {resource!r}: {e}")
