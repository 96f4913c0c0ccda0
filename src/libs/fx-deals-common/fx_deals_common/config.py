# src/libs/fx-deals-common/fx_deals_common/config.py
import os
from dotenv import load_dotenv

# Load environment variables from a .env file for local development.
load_dotenv()


# Database Configurations
POSTGRES_USER = os.getenv("POSTGRES_USER", "user")
POSTGRES_PASSWORD = os.getenv("POSTGRES_PASSWORD", "password")
POSTGRES_DB = os.getenv("POSTGRES_DB", "fx_deals_db")
POSTGRES_HOST = os.getenv("POSTGRES_HOST", "postgres")
POSTGRES_PORT = os.getenv("POSTGRES_PORT", "5432")

# Service identity, stamped onto every log record
SERVICE_NAME = os.getenv("SERVICE_NAME", "fx-deals-service")
ENVIRONMENT = os.getenv("ENVIRONMENT", "local")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Startup database probe
DB_STARTUP_CHECK_ATTEMPTS = int(os.getenv("DB_STARTUP_CHECK_ATTEMPTS", "5"))
DB_STARTUP_CHECK_WAIT_SECONDS = int(os.getenv("DB_STARTUP_CHECK_WAIT_SECONDS", "2"))
