from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # App settings
    PROJECT_NAME: str = "FinanceTracker"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173", "http://localhost:8000"]

    # Storage: "dynamo" or "memory"
    STORAGE_BACKEND: str = "dynamo"

    # DynamoDB
    DYNAMO_REGION: str = "eu-west-1"
    DYNAMO_USERS_TABLE: str = "finance-tracker-users"
    DYNAMO_CATEGORIES_TABLE: str = "finance-tracker-categories"
    DYNAMO_EXPENSES_TABLE: str = "finance-tracker-expenses"

    # JWT Authentication
    JWT_SECRET_KEY: str = Field(default="change-me-in-production")
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days

    # Count amounts of uncategorized expenses in the category breakdown total
    BREAKDOWN_INCLUDE_UNCATEGORIZED: bool = True


settings = Settings()
