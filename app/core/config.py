from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database (Supabase PostgreSQL)
    DATABASE_URL: str

    # Supabase Configuration
    SUPABASE_URL: Optional[str] = None
    SUPABASE_KEY: Optional[str] = None
    SUPABASE_SERVICE_KEY: Optional[str] = None

    # JWT (Supabase signs access tokens with the project JWT secret)
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"
    JWT_EXPIRATION_HOURS: int = 24

    # App Configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "SubManager Backend"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Cache / Redis
    REDIS_URL: Optional[str] = None
    REDIS_PASSWORD: Optional[str] = None
    CACHE_TTL_SECONDS: int = 300

    # Billing
    DEFAULT_CURRENCY: str = "BDT"
    # False keeps the legacy behaviour: raw cost summed regardless of billing cycle
    NORMALIZE_MONTHLY_TOTAL: bool = True
    UPCOMING_PAYMENTS_LIMIT: int = 5

    @model_validator(mode='after')
    def assemble_redis_url(self) -> 'Settings':
        if self.REDIS_PASSWORD and self.REDIS_URL:
            # URL already carries a password (redis://:password@...)
            if "@" in self.REDIS_URL:
                return self

            import urllib.parse
            if "redis://" in self.REDIS_URL:
                encoded_pwd = urllib.parse.quote_plus(self.REDIS_PASSWORD)
                # redis://:PASSWORD@HOST:PORT/DB
                self.REDIS_URL = self.REDIS_URL.replace("redis://", f"redis://:{encoded_pwd}@", 1)
        return self

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8080",
    ]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
