"""Application and server settings."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ServerConfig:
    """Where the server listens and how long a client has to authenticate."""

    host: str = "localhost"
    port: int = 8080
    auth_timeout: int = 10


@dataclass
class AppConfig:
    """All settings of the application."""

    server_config: ServerConfig = field(default_factory=ServerConfig)