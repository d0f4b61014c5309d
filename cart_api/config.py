from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./cart_api.db"

    # Application
    DEBUG: bool = False
    PROJECT_NAME: str = "CoCart REST API"
    VERSION: str = "4.0.0"
    HOME_URL: str = "http://localhost:8000"

    # Optional JSON file of products to load at startup: [{"id", "name", "price", "stock_quantity"}]
    PRODUCTS_FILE: str = ""

    # API namespace: /{API_NAMESPACE}/{API_VERSION}/...
    API_NAMESPACE: str = "cocart"
    API_VERSION: str = "v2"

    # Batch requests
    BATCH_MAX_REQUESTS: int = 25
    NOTICE_TYPES: List[str] = ["error", "success", "notice", "info"]

    # API permission
    REQUIRE_ACCESS_TOKEN: bool = False
    ACCESS_TOKEN: str = ""

    # Store
    STORE_TITLE: str = "CoCart Store"
    STORE_DESCRIPTION: str = ""
    STORE_LANGUAGE: str = "en-US"
    STORE_GMT_OFFSET: str = "0"
    STORE_TIMEZONE: str = "UTC"
    STORE_ADDRESS: str = ""
    STORE_ADDRESS_2: str = ""
    STORE_CITY: str = ""
    STORE_COUNTRY: str = ""
    STORE_POSTCODE: str = ""

    # Currency
    CURRENCY_CODE: str = "USD"
    CURRENCY_SYMBOL: str = "$"
    CURRENCY_MINOR_UNIT: int = 2
    CURRENCY_DECIMAL_SEPARATOR: str = "."
    CURRENCY_THOUSAND_SEPARATOR: str = ","
    CURRENCY_POSITION: str = "left"  # left, right, left_space, right_space

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def api_prefix(self) -> str:
        return f"/{self.API_NAMESPACE}/{self.API_VERSION}"


settings = Settings()


def get_settings() -> Settings:
    """Dependency returning the application settings."""
    return settings
