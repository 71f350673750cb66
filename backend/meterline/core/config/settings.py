"""Application settings loaded from the environment.

Every value has a default suitable for local development, so importing the
settings never fails. Deployments override through environment variables or
a ``.env`` file next to the backend.
"""

from typing import Optional

from pydantic import Field, PostgresDsn, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from meterline.core.config.enums import Environment


class Settings(BaseSettings):
    """Meterline settings.

    Attributes:
    ----------
        ENVIRONMENT: Deployment environment (local, test, dev, prd).
        LOG_LEVEL: Root log level for the meterline logger.
        POSTGRES_*: Connection details for the ledger database.
        USAGE_WARNING_PERCENT: Percent used at which a resource reports ``warning``.
        USAGE_LEDGER_MAX_ATTEMPTS: Compare-and-swap attempts per ledger write.
        USAGE_ALERT_WEBHOOK_URL: Where threshold and overage alerts are POSTed.
        USAGE_REPORT_SERVICE_URL: Endpoint of the usage report generator.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=True)

    PROJECT_NAME: str = "Meterline"
    ENVIRONMENT: Environment = Environment.LOCAL
    LOCAL_DEVELOPMENT: bool = False
    TESTING: bool = False
    LOG_LEVEL: str = "INFO"

    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "meterline"
    POSTGRES_PASSWORD: str = "meterline"
    POSTGRES_DB: str = "meterline"
    POSTGRES_SSLMODE: str = "prefer"

    db_pool_size: int = Field(default=20, ge=1, alias="DB_POOL_SIZE")
    db_pool_max_overflow: int = Field(default=40, ge=0, alias="DB_POOL_MAX_OVERFLOW")

    RUN_ALEMBIC_MIGRATIONS: bool = False

    USAGE_WARNING_PERCENT: float = Field(default=80.0, gt=0, le=100)
    USAGE_LEDGER_MAX_ATTEMPTS: int = Field(default=5, ge=1)

    USAGE_ALERT_WEBHOOK_URL: Optional[str] = None
    OUTBOUND_HTTP_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)

    USAGE_REPORT_SERVICE_URL: Optional[str] = None
    USAGE_REPORT_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_ASYNC_DATABASE_URI(self) -> str:  # noqa: N802
        """Async SQLAlchemy URI for the asyncpg driver."""
        return str(
            PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD,
                host=self.POSTGRES_HOST,
                port=self.POSTGRES_PORT,
                path=self.POSTGRES_DB,
            )
        )
