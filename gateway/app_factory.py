"""Assembles the gateway ASGI stack.

    request -> MountAdminFirst -> TraceMiddleware -> CORSMiddleware -> GatewayRouter
                      \\-> AdminRouter (/__*)
"""

import logging
from typing import Optional
from redis import asyncio as redis
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp
from gateway.config.routes import build_route_table
from gateway.config.settings import Settings
from gateway.core.admin_router import AdminRouter, MountAdminFirst
from gateway.core.auth import AuthGate, CredentialVerifier, PresenceVerifier
from gateway.core.backend import Backend, HttpBackend
from gateway.core.gateway_router import GatewayRouter
from gateway.core.session_store import RedisSessionVerifier
from gateway.core.trace import TraceMiddleware

logger = logging.getLogger(__name__)


def build_verifier(settings: Settings) -> CredentialVerifier:
    if settings.redis_url:
        logger.info("Session tokens verified against Redis")
        client = redis.Redis.from_url(settings.redis_url, decode_responses=True)
        return RedisSessionVerifier(client)
    return PresenceVerifier()


def create_gateway(
    settings: Settings,
    backend: Optional[Backend] = None,
    verifier: Optional[CredentialVerifier] = None,
) -> GatewayRouter:
    backend = backend or HttpBackend(settings.backend_url, timeout=settings.backend_timeout)
    return GatewayRouter(
        build_route_table(backend),
        backend,
        auth_gate=AuthGate(verifier or build_verifier(settings)),
        expose_error_detail=settings.expose_error_detail,
        frontend_index=settings.frontend_index,
    )


def create_app(
    settings: Settings,
    backend: Optional[Backend] = None,
    verifier: Optional[CredentialVerifier] = None,
) -> ASGIApp:
    core_gateway = create_gateway(settings, backend, verifier)

    gateway_app = CORSMiddleware(
        core_gateway,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    gateway_app = TraceMiddleware(gateway_app)

    # admin reads the unwrapped router
    admin_app = AdminRouter(core_gateway)
    return MountAdminFirst(admin_app, gateway_app)
