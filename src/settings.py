from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # FastAPI
    API_VERSION: str = "2.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    # Database
    DB_URL: str = "sqlite:///./simulations.db"

    # Grading
    PASSING_THRESHOLD: float = 10.5
    WEIGHT_SUM_TOLERANCE: float = 0.01
    HISTORY_LIMIT: int = 20
    DEFAULT_USER_ID: str = "anonymous"

    # Identity provider (Firebase Identity Toolkit)
    IDENTITY_API_KEY: str = ""
    IDENTITY_BASE_URL: str = "https://identitytoolkit.googleapis.com/v1"
    IDENTITY_TIMEOUT: float = 10.0

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
