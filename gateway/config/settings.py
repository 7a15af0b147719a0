import os
from dataclasses import dataclass, field
from typing import Mapping, Optional


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    environment: str = "production"
    backend_url: str = "http://localhost:5001"
    backend_timeout: float = 5.0
    redis_url: Optional[str] = None
    frontend_index: str = "index.html"
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @property
    def expose_error_detail(self) -> bool:
        return self.environment == "development"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = None) -> "Settings":
        env = os.environ if environ is None else environ
        origins = env.get("CORS_ORIGINS", "*")
        return cls(
            host=env.get("HOST", "0.0.0.0"),
            port=int(env.get("PORT", "3000")),
            environment=env.get("GATEWAY_ENV", "production").lower(),
            backend_url=env.get("BACKEND_URL", "http://localhost:5001"),
            backend_timeout=float(env.get("BACKEND_TIMEOUT", "5.0")),
            redis_url=env.get("REDIS_URL") or None,
            frontend_index=env.get("FRONTEND_INDEX", "index.html"),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )
