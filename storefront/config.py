from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./dev.db"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    FRONTEND_ORIGINS: List[str] = ["http://localhost:5173"]

    # shared admin credential; empty disables admin routes
    ADMIN_TOKEN: str = ""

    STRIPE_SECRET_KEY: str = ""
    STRIPE_PUBLIC_KEY: str = ""
    PAYMENT_CURRENCY: str = "usd"
    PAYMENT_DEMO_DELAY_MS: int = 1500
    PAYMENT_AMOUNT_TOLERANCE: int = 1  # minor units

    CART_STORAGE_PATH: str = "./cart-storage.json"
    CART_STORAGE_KEY: str = "concert-store-cart"

    CUSTOMCAT_API_KEY_SETTING: str = "CUSTOMCAT_API_KEY"
    CUSTOMCAT_TIMEOUT_SECONDS: float = 5.0
    SYNC_LOCK_DIR: str = ""

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
