from dotenv import load_dotenv
from pydantic import BaseModel
from typing import List, Optional
import os

# Load .env automatically
load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "development")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./budget.db")
    database_echo: bool = os.getenv("DATABASE_ECHO", "false").lower() in {"1", "true", "yes"}

    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

    exchange_rate_api_url: str = os.getenv(
        "EXCHANGE_RATE_API_URL", "https://api.exchangerate-api.com/v4/latest"
    )
    exchange_rate_timeout: float = float(os.getenv("EXCHANGE_RATE_TIMEOUT", "10"))
    cron_secret: Optional[str] = os.getenv("CRON_SECRET") or None

    cors_origins: List[str] = _split_csv(
        os.getenv(
            "CORS_ORIGINS",
            "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000",
        )
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


# Global settings instance
settings = Settings()
