from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import PostgresDsn, computed_field, field_validator
from typing import Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    # Security: Remove default credentials - require them to be set in .env
    POSTGRES_USER: str
    POSTGRES_PASSWORD: str
    POSTGRES_DB: str = "cinematch"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432

    @computed_field
    def DATABASE_URL(self) -> PostgresDsn:
        return PostgresDsn.build(
            scheme="postgresql+asyncpg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_HOST,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        )

    ENV: str = "production"
    LOG_LEVEL: str = "INFO"
    APP_DOMAIN: Optional[str] = None  # Public domain; hides /docs when set

    # Session lifecycle
    SESSION_TTL_HOURS: int = 24  # Sessions expire this long after creation

    @field_validator("SESSION_TTL_HOURS")
    @classmethod
    def validate_ttl(cls, v):
        if v <= 0:
            raise ValueError("SESSION_TTL_HOURS must be positive")
        return v

    @property
    def is_dev(self) -> bool:
        return self.ENV.lower() in ["dev", "development", "local"]

settings = Settings()
