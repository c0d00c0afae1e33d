from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    PROJECT_NAME: str = "Dental Shade Analysis API"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"

    # Mongo
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB_NAME: str = "dental_shade"
    MONGO_DNS_NAMESERVERS: str = Field(
        default="8.8.8.8,8.8.4.4,1.1.1.1",
        description="Comma-separated resolvers used for mongodb+srv lookups"
    )

    # Auth
    ACCESS_TOKEN_SECRET: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    JWT_ALGORITHM: str = "HS256"
    BCRYPT_ROUNDS: int = Field(default=12, ge=4, le=31)

    # HTTP
    CORS_ORIGINS: str = Field(default="http://localhost:3000", description="Comma-separated origins")
    MAX_BODY_BYTES: int = 10 * 1024 * 1024

    # Analysis service (OpenAI-compatible endpoint)
    OPENROUTER_API_KEY: str = ""
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    APP_URL: str = "http://localhost:3000"
    ANALYSIS_MODEL: str = "google/gemini-flash-1.5"
    ANALYSIS_MAX_TOKENS: int = 2000
    ANALYSIS_TEMPERATURE: float = 0.3
    ANALYSIS_TIMEOUT_SECONDS: float = 60.0

    @property
    def cors_origins(self) -> List[str]:
        return _split_csv(self.CORS_ORIGINS)

    @property
    def dns_nameservers(self) -> List[str]:
        return _split_csv(self.MONGO_DNS_NAMESERVERS)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()
