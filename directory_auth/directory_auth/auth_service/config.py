"""
Configuration management for the auth service
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal, Optional

DEFAULT_JWT_SECRET = "your-jwt-secret"


class Settings(BaseSettings):
    """Auth service configuration loaded from environment variables"""

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 5002
    LOG_LEVEL: str = "INFO"

    # User directory
    DIRECTORY_BACKEND: Literal["rest", "sql"] = "rest"
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    USERS_TABLE: str = "users"
    DIRECTORY_TIMEOUT_SECONDS: float = 10.0
    DATABASE_URL: str = "sqlite:///./app.db"

    # Tokens
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # CORS Configuration
    CORS_ORIGIN: str = "https://employee-management-two-xi.vercel.app"
    CORS_METHODS: List[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    CORS_HEADERS: List[str] = ["Content-Type", "Authorization", "X-Requested-With"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def uses_default_jwt_secret(self) -> bool:
        return self.JWT_SECRET == DEFAULT_JWT_SECRET


# Global settings instance
settings = Settings()
