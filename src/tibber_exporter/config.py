from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from tibber_exporter.exceptions import ConfigurationError

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    # General
    LOG_LEVEL: LogLevel = "INFO"

    # Tibber bridge
    TIBBER_HOST: str = ""
    TIBBER_NODE: int = Field(default=1, ge=0)
    TIBBER_USERNAME: str = "admin"
    TIBBER_PASSWORD_FILE: str = ""

    # Metrics listener
    BIND_ADDRESS: str = "127.0.0.1:8080"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


def read_password_file(path: str) -> SecretStr:
    """Read the bridge password, ignoring surrounding whitespace."""
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Could not read password file {path}: {e}") from e
    return SecretStr(content.strip())


def parse_bind_address(address: str) -> tuple[str, int]:
    """Split ``host:port`` (or ``[v6-host]:port``) into its parts."""
    host, sep, port = address.rpartition(":")
    if not sep or not host:
        raise ConfigurationError(f"Invalid bind address {address!r}, expected host:port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    if not port.isdigit() or not 0 < int(port) < 65536:
        raise ConfigurationError(f"Invalid port in bind address {address!r}")
    return host, int(port)
