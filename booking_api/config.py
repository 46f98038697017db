from functools import lru_cache
from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Database
    DATABASE_URL: str = "sqlite:///./booking.db"

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    ROLLING_SESSIONS: bool = True
    SESSION_TOKEN_HEADER: str = "X-Session-Token"
    PASSWORD_MIN_LENGTH: int = 6
    BCRYPT_ROUNDS: int = 12

    # Payment gateway (Cashfree-compatible); "fake" answers locally without calling out
    PAYMENT_GATEWAY: Literal["cashfree", "fake"] = "cashfree"
    PAYMENT_BASE_URL: str = "https://sandbox.cashfree.com/pg"
    PAYMENT_APP_ID: str = ""
    PAYMENT_SECRET_KEY: str = ""
    PAYMENT_API_VERSION: str = "2022-09-01"
    PAYMENT_CURRENCY: str = "INR"
    PAYMENT_TIMEOUT_SECONDS: float = 10.0
    PAYMENT_DEFAULT_CUSTOMER_PHONE: str = "9999999999"

    # Application
    PROJECT_NAME: str = "Booking Request Service"
    API_V1_STR: str = ""
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]


@lru_cache
def get_settings() -> Settings:
    return Settings()
