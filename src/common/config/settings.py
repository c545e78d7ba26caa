"""Application settings and environment variables."""

import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


class Settings:
    # Shopify webhook signing
    SHOPIFY_WEBHOOK_SECRET: str = os.getenv("SHOPIFY_WEBHOOK_SECRET", "")
    SUPPORTED_WEBHOOK_TOPIC: str = os.getenv("SUPPORTED_WEBHOOK_TOPIC", "inventory_levels/update")

    # Persistence backend: "mysql" or "dynamodb"
    INVENTORY_STORE_BACKEND: str = os.getenv("INVENTORY_STORE_BACKEND", "mysql")
    INVENTORY_TABLE: str = os.getenv("INVENTORY_TABLE", "sis_inventory_levels")

    DB_HOST: str = os.getenv("DB_HOST", "localhost")
    DB_DATABASE: str = os.getenv("DB_NAME", "shop_inventory_db")
    DB_USER: str = os.getenv("DB_USER", "user")
    DB_PASSWORD: str = os.getenv("DB_PASSWORD", "password")

    AWS_REGION: Optional[str] = os.getenv("AWS_REGION")

    # Logging settings
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")  # INFO, DEBUG, WARNING, ERROR, CRITICAL


settings = Settings()
