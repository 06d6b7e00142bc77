from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read from OS env and optional .env file in project root.
    _project_root = Path(__file__).parent.parent

    model_config = SettingsConfigDict(
        env_file=str(_project_root / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # HTTP listener
    host: str = Field("0.0.0.0", alias="RELAY_HOST", description="Bind address for uvicorn")
    port: int = Field(8080, alias="RELAY_PORT", description="Bind port for uvicorn")
    worker_pool_size: int = Field(
        10,
        alias="WORKER_POOL_SIZE",
        description="Upper bound of threads serving submissions and polls concurrently",
        ge=1,
    )

    # CORS
    cors_allow_origins: str = Field(
        "*",
        alias="CORS_ALLOW_ORIGINS",
        description="Allowed CORS origins, comma separated",
    )
    cors_allow_methods: str = Field(
        "GET,POST,DELETE,OPTIONS",
        alias="CORS_ALLOW_METHODS",
        description="Allowed CORS methods, comma separated; * means all",
    )
    cors_allow_headers: str = Field(
        "Content-Type",
        alias="CORS_ALLOW_HEADERS",
        description="Allowed CORS request headers, comma separated; * means all",
    )

    # Persistence
    database_url: str = Field(
        "sqlite+pysqlite:///./chat.db",
        alias="DATABASE_URL",
        description="SQLAlchemy database URL used for message / chunk / activity storage",
    )
    persistence_workers: int = Field(
        2,
        alias="PERSISTENCE_WORKERS",
        description="Threads dedicated to best-effort persistence writes",
        ge=1,
    )
    persistence_timeout_seconds: float = Field(
        2.0,
        alias="PERSISTENCE_TIMEOUT_SECONDS",
        description="How long a chunk upload waits for its write before answering anyway",
        gt=0,
    )

    # Reliability protocol
    receive_window_size: int = Field(
        5,
        alias="RECEIVE_WINDOW_SIZE",
        description="Accepted-but-undelivered messages a recipient buffers before refusing more",
        ge=1,
    )
    packet_loss_enabled: bool = Field(
        True,
        alias="PACKET_LOSS_ENABLED",
        description="Simulate an unreliable channel by dropping submissions",
    )
    packet_loss_probability: float = Field(
        0.1,
        alias="PACKET_LOSS_PROBABILITY",
        description="Probability that a text submission is dropped before admission",
        ge=0.0,
        le=1.0,
    )
    session_idle_timeout_seconds: float = Field(
        300,
        alias="SESSION_IDLE_TIMEOUT_SECONDS",
        description="Idle time after which a recipient session is evicted",
        gt=0,
    )
    session_sweep_interval_seconds: float = Field(
        60,
        alias="SESSION_SWEEP_INTERVAL_SECONDS",
        description="Period of the idle session sweep",
        gt=0,
    )
    active_user_window_seconds: int = Field(
        300,
        alias="ACTIVE_USER_WINDOW_SECONDS",
        description="Users with persisted activity inside this window are listed as active",
        ge=1,
    )

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL", description="Root log level")
    log_timezone: str | None = Field(
        None,
        alias="LOG_TIMEZONE",
        description="IANA timezone for log timestamps; defaults to the system zone",
    )
    log_dir: str = Field("logs", alias="LOG_DIR", description="Directory for daily log files")
    log_backup_days: int = Field(
        7,
        alias="LOG_BACKUP_DAYS",
        description="Number of daily log files kept",
        ge=0,
    )

    @staticmethod
    def _split_csv(value: str) -> list[str]:
        if value.strip() == "*":
            return ["*"]
        return [item.strip() for item in value.split(",") if item.strip()]

    @property
    def cors_origins(self) -> list[str]:
        return self._split_csv(self.cors_allow_origins)

    @property
    def cors_methods(self) -> list[str]:
        return self._split_csv(self.cors_allow_methods)

    @property
    def cors_headers(self) -> list[str]:
        return self._split_csv(self.cors_allow_headers)


settings = Settings()  # Reads from environment if available
