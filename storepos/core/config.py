"""
Centralized application configuration
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings (loaded from environment / .env)"""

    # API Settings
    API_TITLE: str = "Store POS API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Point-of-sale, inventory and sales reporting API"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_DEBUG: bool = True

    # Database
    DATABASE_URL: str = ""
    DB_CONNECT_TIMEOUT: int = 10
    DB_MAX_RETRIES: int = 3
    DB_RETRY_DELAY: float = 1.0

    # CORS - Can be string (comma-separated) or JSON array
    # Example: "http://localhost:3000,https://yourdomain.com" or '["http://localhost:3000"]'
    ALLOWED_ORIGINS: Optional[str] = "http://localhost:3000"

    LOG_LEVEL: str = "INFO"

    # Store settings
    STORE_NAME: str = "Amin Store"
    CURRENCY: str = "USD"
    CURRENCY_SYMBOL: str = "$"
    CURRENCY_DECIMALS: int = 2
    LOW_STOCK_THRESHOLD: int = 5
    WALK_IN_CUSTOMER_LABEL: str = "Walk-in Customer"

    # Reporting
    TOP_PRODUCTS_LIMIT: int = 5
    DAILY_SERIES_DAYS: int = 30

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        if not self.ALLOWED_ORIGINS:
            return ["http://localhost:3000"]

        # Try JSON parse first (for array format)
        import json
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
            if isinstance(origins, list):
                return origins
        except (json.JSONDecodeError, ValueError):
            pass

        # Fall back to comma-separated string
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
