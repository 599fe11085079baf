import logging
import os
from dotenv import load_dotenv

# Logging configuration
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

# Load environment variables
load_dotenv(dotenv_path=".env", encoding="utf-8")

# Silence SQLAlchemy logs
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def _as_bool(value: str) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "on")


class Configuration:
    def __init__(self):

        # Environment
        self.environment = os.getenv("ENVIRONMENT", "development").lower()

        # Database
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./storefront.db")
        self.populate_database = _as_bool(os.getenv("POPULATE_DATABASE", "true"))

        # Auth
        self.secret_key = os.getenv("SECRET_KEY", "change-me-in-production")
        self.jwt_expiration_hours = int(os.getenv("JWT_EXPIRATION_HOURS", 24))

        # Simulated gateway
        self.payment_success_rate = float(os.getenv("PAYMENT_SUCCESS_RATE", 0.9))

        # Pagination
        self.products_page_size = int(os.getenv("PRODUCTS_PAGE_SIZE", 12))
        self.admin_page_size = int(os.getenv("ADMIN_PAGE_SIZE", 10))
        self.max_page_size = int(os.getenv("MAX_PAGE_SIZE", 100))

        # CORS for the product API
        self.cors_origins = [
            origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
        ]

        # Display
        self.currency = os.getenv("CURRENCY", "USD")
        self.locale = os.getenv("LOCALE", "en_US")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def connect_to_database(self) -> str:
        # Never log credentials
        safe_url = self.database_url.split("@")[-1]
        logging.info(f"DATABASE >>> Selected ({self.environment}) -> {safe_url}")
        return self.database_url
