import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

DEFAULT_HTTP_PORT = 8080
DEFAULT_SWAGGER_UI = "/swagger-ui"
LOG_FORMATS = ("json", "text")


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""


@dataclass(frozen=True)
class AppSettings:
    mode: str = "prod"
    debug: bool = False
    swagger_ui: str = DEFAULT_SWAGGER_UI


@dataclass(frozen=True)
class HTTPSettings:
    host: str = "0.0.0.0"
    port: int = DEFAULT_HTTP_PORT
    # read/write timeouts are parsed so existing env files stay valid; uvicorn
    # has no per-request read or write deadline, so only idle_timeout is applied.
    read_timeout: int = 5
    write_timeout: int = 10
    idle_timeout: int = 120


@dataclass(frozen=True)
class LogSettings:
    level: str = "INFO"
    format: str = "json"
    output: str = ""


@dataclass(frozen=True)
class OpenAPISettings:
    spec_path: str = "openapi/openapi.yaml"
    api_prefix: str = "/api/v1"

    def resolve_spec_path(self) -> Path:
        """Locate the OpenAPI document.

        Absolute paths are used as-is. Relative paths are tried against the
        working directory first, then against the project root.
        """
        path = Path(self.spec_path).expanduser()
        if path.is_absolute() or path.exists():
            return path
        return PROJECT_ROOT / path


@dataclass(frozen=True)
class DatabaseSettings:
    host: str = "localhost"
    port: int = 5432
    user: str = "postgres"
    password: str = field(default="postgres", repr=False)
    name: str = "users"
    ssl_mode: str = "disable"
    max_connections: int = 10
    url: str = field(default="", repr=False)


@dataclass(frozen=True)
class Settings:
    app: AppSettings = field(default_factory=AppSettings)
    http: HTTPSettings = field(default_factory=HTTPSettings)
    log: LogSettings = field(default_factory=LogSettings)
    openapi: OpenAPISettings = field(default_factory=OpenAPISettings)
    database: DatabaseSettings = field(default_factory=DatabaseSettings)

    def summary(self) -> str:
        """One-line description of the effective settings, without credentials."""
        return (
            f"App: {self.app.mode} (debug={self.app.debug}), "
            f"HTTP: {self.http.host}:{self.http.port}, "
            f"Log: {self.log.level} ({self.log.format}), "
            f"OpenAPI: {self.openapi.spec_path}, "
            f"DB: {self.database.host}:{self.database.port}"
        )


def _get_str(env, key: str, default: str) -> str:
    value = env.get(key)
    if value is None or value == "":
        return default
    return value.strip()


def _get_int(env, key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None


def _get_bool(env, key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ConfigError(f"{key} must be a boolean, got {raw!r}")


def _get_log_level(env, key: str, default: str) -> str:
    level = _get_str(env, key, default).upper()
    if level == "WARN":
        level = "WARNING"
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"{key} must be a logging level, got {level!r}")
    return level


def apply_mode(settings: Settings) -> Settings:
    """Override settings with the presets of the selected run mode."""
    mode = settings.app.mode
    if mode == "dev":
        return replace(
            settings,
            app=replace(settings.app, debug=True, swagger_ui=DEFAULT_SWAGGER_UI),
            log=replace(settings.log, level="DEBUG", format="json"),
            database=replace(settings.database, ssl_mode="disable"),
            http=replace(settings.http, port=DEFAULT_HTTP_PORT),
        )
    if mode == "test":
        return replace(
            settings,
            app=replace(settings.app, debug=True, swagger_ui=""),
            log=replace(settings.log, level="DEBUG", format="text"),
            database=replace(settings.database, ssl_mode="disable"),
            http=replace(settings.http, port=DEFAULT_HTTP_PORT),
        )
    if mode == "prod":
        return replace(
            settings,
            app=replace(settings.app, debug=False, swagger_ui=""),
            log=replace(settings.log, level="INFO", format="json"),
            database=replace(settings.database, ssl_mode="require"),
            http=replace(settings.http, port=DEFAULT_HTTP_PORT),
        )
    return settings


def load_settings(env=None) -> Settings:
    """Build :class:`Settings` from a mapping of environment variables."""
    if env is None:
        env = os.environ

    log_format = _get_str(env, "LOG_FORMAT", "json").lower()
    if log_format not in LOG_FORMATS:
        raise ConfigError(f"LOG_FORMAT must be one of {LOG_FORMATS}, got {log_format!r}")

    settings = Settings(
        app=AppSettings(
            mode=_get_str(env, "APP_MODE", "prod").lower(),
            debug=_get_bool(env, "APP_DEBUG", False),
            swagger_ui=env.get("APP_SWAGGER_UI", DEFAULT_SWAGGER_UI).strip(),
        ),
        http=HTTPSettings(
            host=_get_str(env, "HTTP_HOST", "0.0.0.0"),
            port=_get_int(env, "HTTP_PORT", DEFAULT_HTTP_PORT),
            read_timeout=_get_int(env, "HTTP_READ_TIMEOUT", 5),
            write_timeout=_get_int(env, "HTTP_WRITE_TIMEOUT", 10),
            idle_timeout=_get_int(env, "HTTP_IDLE_TIMEOUT", 120),
        ),
        log=LogSettings(
            level=_get_log_level(env, "LOG_LEVEL", "INFO"),
            format=log_format,
            output=_get_str(env, "LOG_OUTPUT", ""),
        ),
        openapi=OpenAPISettings(
            spec_path=_get_str(env, "OPENAPI_SPEC_PATH", "openapi/openapi.yaml"),
            api_prefix=_get_str(env, "OPENAPI_API_PREFIX", "/api/v1").rstrip("/"),
        ),
        database=DatabaseSettings(
            host=_get_str(env, "DB_HOST", "localhost"),
            port=_get_int(env, "DB_PORT", 5432),
            user=_get_str(env, "DB_USER", "postgres"),
            password=env.get("DB_PASSWORD", "postgres"),
            name=_get_str(env, "DB_NAME", "users"),
            ssl_mode=_get_str(env, "DB_SSL_MODE", "disable"),
            max_connections=_get_int(env, "DB_MAX_CONNECTIONS", 10),
            url=_get_str(env, "DATABASE_URL", ""),
        ),
    )
    return apply_mode(settings)


def get_settings() -> Settings:
    """Load `.env` from the project root (if present) and read the environment."""
    dotenv_path = PROJECT_ROOT / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path)
    return load_settings()
