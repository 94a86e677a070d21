import os
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import quote

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, DotEnvSettingsSource, SettingsConfigDict

# Written by POST /api/connections/test-and-save and read back on the next start
DEFAULT_CREDENTIALS_FILE = "sql_credentials.env"


@dataclass(frozen=True)
class DatabaseCredentials:
    host: str = "localhost"
    port: int = 5432
    database: str = "postgres"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def async_url(self) -> str:
        """asyncpg URL for SQLAlchemy; user and password are URL-quoted."""
        return (
            f"postgresql+asyncpg://{quote(self.user, safe='')}:{quote(self.password, safe='')}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    def as_env(self) -> dict[str, str]:
        return {
            "POSTGRES_HOST": self.host,
            "POSTGRES_PORT": str(self.port),
            "POSTGRES_DB": self.database,
            "POSTGRES_USER": self.user,
            "POSTGRES_PASSWORD": self.password,
        }


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", DEFAULT_CREDENTIALS_FILE),
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Meta Ads Dashboard"
    app_env: str = Field("development", validation_alias=AliasChoices("APP_ENV", "NODE_ENV"))
    app_debug: bool = False
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:5173"

    # Port (matches the frontend's proxy target)
    port: int = 3001

    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "postgres"
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_ssl: bool = False

    # Schema provisioning and credential persistence
    provision_on_startup: bool = True
    credentials_file: str = DEFAULT_CREDENTIALS_FILE

    # Rate limit for the credential probing endpoints
    connection_test_rate_limit: str = "10/minute"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # CREDENTIALS_FILE moves the saved credentials; read them from there on start
        credentials_file = os.environ.get("CREDENTIALS_FILE")
        if credentials_file and dotenv_settings.env_file == cls.model_config["env_file"]:
            dotenv_settings = DotEnvSettingsSource(settings_cls, env_file=(".env", credentials_file))
        return init_settings, env_settings, dotenv_settings, file_secret_settings

    @property
    def database_credentials(self) -> DatabaseCredentials:
        return DatabaseCredentials(
            host=self.postgres_host,
            port=self.postgres_port,
            database=self.postgres_db,
            user=self.postgres_user,
            password=self.postgres_password,
        )

    @property
    def async_database_url(self) -> str:
        return self.database_credentials.async_url

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def cors_origin_list(self) -> list[str]:
        return [
            origin.strip().rstrip("/")
            for origin in self.cors_origins.split(",")
            if origin.strip()
        ]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
