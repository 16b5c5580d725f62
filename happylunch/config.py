import logging
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Get the directory containing the project
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env file explicitly from the project root
load_dotenv(BASE_DIR / '.env')


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def build_database_url() -> str:
    """Resolve the database URL from DATABASE_URL or the discrete DB_* fields"""
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        # Hosted Postgres providers still hand out the old scheme
        if database_url.startswith("postgres://"):
            database_url = "postgresql://" + database_url[len("postgres://"):]
        return database_url

    dialect = os.getenv("DB_DIALECT")
    name = os.getenv("DB_NAME")
    if not dialect or not name:
        return f"sqlite:///{BASE_DIR / 'happylunch.db'}"

    if dialect == "sqlite":
        return f"sqlite:///{name}"

    if dialect == "postgres":
        dialect = "postgresql"
    user = os.getenv("DB_USER", "")
    password = os.getenv("DB_PASSWORD", "")
    host = os.getenv("DB_HOST", "localhost")
    port = os.getenv("DB_PORT")
    credentials = f"{user}:{password}@" if user else ""
    location = f"{host}:{port}" if port else host
    return f"{dialect}://{credentials}{location}/{name}"


class Settings:
    def __init__(self):
        self.database_url = build_database_url()
        self.jwt_secret = os.getenv("JWT_SECRET", "change-me")  # set a real secret in production
        self.jwt_algorithm = "HS256"
        self.access_token_expire_days = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7"))
        self.port = int(os.getenv("PORT", "5000"))
        self.cors_origins = _split_list(os.getenv("CORS_ORIGINS", "*"))
        self.admin_emails = [email.lower() for email in _split_list(os.getenv("ADMIN_EMAILS", ""))]
        self.upload_dir = os.getenv("UPLOAD_DIR", str(BASE_DIR / "uploads"))
        self.max_upload_bytes = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        # Pool limits only apply to server databases
        self.pool_size = 100
        self.pool_timeout = 60
        self.pool_recycle = 10


settings = Settings()


def configure_logging():
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
