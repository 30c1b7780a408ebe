"""Configuration management with environment variable support."""

import os
import secrets
from dataclasses import dataclass, field

from cardplay.dealer import DealerRuleset
from cardplay.exceptions import ConfigurationError
from cardplay.game.config import SessionConfig
from cardplay.outcome import PayoutRuleset


def _parse_cors_origins() -> list[str]:
    """Parse CORS_ORIGINS environment variable."""
    origins = os.getenv("CORS_ORIGINS", "http://localhost:8000")
    return [o.strip() for o in origins.split(",") if o.strip()]


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_int(name: str, default: str) -> int:
    value = os.getenv(name, default)
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer (got {value!r})") from exc


@dataclass(frozen=True)
class CORSConfig:
    """CORS configuration."""

    allowed_origins: list[str] = field(default_factory=_parse_cors_origins)
    allow_credentials: bool = True
    allow_methods: list[str] = field(default_factory=lambda: ["*"])
    allow_headers: list[str] = field(default_factory=lambda: ["*"])


@dataclass(frozen=True)
class RateLimitConfig:
    """Rate limiting configuration."""

    enabled: bool = field(default_factory=lambda: _env_flag("RATE_LIMIT_ENABLED", "true"))
    requests_per_minute: int = field(
        default_factory=lambda: int(os.getenv("RATE_LIMIT_RPM", "60"))
    )


@dataclass(frozen=True)
class SecurityConfig:
    """Security configuration."""

    secret_key: str = field(
        default_factory=lambda: os.getenv("SECRET_KEY", secrets.token_urlsafe(32))
    )


@dataclass(frozen=True)
class RedisConfig:
    """Redis connection configuration. Sessions stay in memory unless enabled."""

    enabled: bool = field(default_factory=lambda: _env_flag("REDIS_ENABLED", "false"))
    host: str = field(default_factory=lambda: os.getenv("REDIS_HOST", "localhost"))
    port: int = field(default_factory=lambda: int(os.getenv("REDIS_PORT", "6379")))
    db: int = field(default_factory=lambda: int(os.getenv("REDIS_DB", "0")))
    password: str | None = field(default_factory=lambda: os.getenv("REDIS_PASSWORD"))

    @property
    def url(self) -> str:
        """Build Redis connection URL."""
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class GameConfig:
    """Rules used for new sessions that do not choose their own."""

    decks: int = field(default_factory=lambda: _env_int("GAME_DECKS", "6"))
    dealer_ruleset: str = field(
        default_factory=lambda: os.getenv("GAME_DEALER_RULESET", DealerRuleset.STANDARD.value)
    )
    payout_ruleset: str = field(
        default_factory=lambda: os.getenv("GAME_PAYOUT_RULESET", PayoutRuleset.STANDARD.value)
    )
    starting_balance: int = field(
        default_factory=lambda: _env_int("GAME_STARTING_BALANCE", "1000")
    )

    def __post_init__(self) -> None:
        """Reject malformed defaults when the configuration is loaded."""
        if self.starting_balance < 0:
            raise ConfigurationError(
                f"GAME_STARTING_BALANCE cannot be negative (got {self.starting_balance})"
            )
        self.session_config()

    def session_config(self, **overrides) -> SessionConfig:
        """
        Build a validated SessionConfig from these defaults.

        Raises:
            ConfigurationError: If a default or an override is malformed
        """
        options = {
            "decks": self.decks,
            "dealer_ruleset": self.dealer_ruleset,
            "payout_ruleset": self.payout_ruleset,
        }
        options.update({k: v for k, v in overrides.items() if v is not None})
        return SessionConfig.from_mapping(options)


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = field(default_factory=lambda: _env_flag("DEBUG", "false"))
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    session_ttl: int = 3600  # Session timeout in seconds

    redis: RedisConfig = field(default_factory=RedisConfig)
    game: GameConfig = field(default_factory=GameConfig)
    cors: CORSConfig = field(default_factory=CORSConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Global configuration instance
config = AppConfig()
