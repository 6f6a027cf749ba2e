from typing import Dict, List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./dev.db"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    FRONTEND_ORIGINS: List[str] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    # pricing, in cents
    DELIVERY_FEE_CENTS: int = 299
    SERVICE_FEE_CENTS: int = 150

    # simulated order lifecycle
    ORDER_PROGRESSION_ENABLED: bool = True
    ORDER_STATUS_DELAYS_SECONDS: Dict[str, int] = {
        "confirmed": 2,
        "preparing": 5,
        "out-for-delivery": 10,
        "delivered": 15,
    }
    ESTIMATED_DELIVERY_MINUTES: int = 30

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
