import logging
import os
from dataclasses import dataclass
from typing import Optional, Sequence

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8765
DEFAULT_SERVER_URI = "ws://localhost:8765"


@dataclass(frozen=True)
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: int = logging.INFO
    # None accepts any Origin header
    allowed_origins: Optional[Sequence[str]] = None

    @classmethod
    def from_env(cls, environ=None) -> "ServerConfig":
        env = os.environ if environ is None else environ
        origins = env.get("ALLOWED_ORIGINS", "")
        allowed = [o.strip() for o in origins.split(",") if o.strip()]
        level_name = env.get("LOG_LEVEL", "INFO").upper()
        return cls(
            host=env.get("HOST", DEFAULT_HOST),
            port=int(env.get("PORT", str(DEFAULT_PORT))),
            log_level=getattr(logging, level_name, logging.INFO),
            allowed_origins=allowed or None,
        )


@dataclass(frozen=True)
class ClientConfig:
    server_uri: str = DEFAULT_SERVER_URI

    @classmethod
    def from_env(cls, environ=None) -> "ClientConfig":
        env = os.environ if environ is None else environ
        return cls(server_uri=env.get("PAIRUP_SERVER_URI", DEFAULT_SERVER_URI))
