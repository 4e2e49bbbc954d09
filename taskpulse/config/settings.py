# taskpulse/config/settings.py
# Runtime configuration read from the environment (and .env when present)

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _split(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings:
    """Application settings"""

    # Database
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./taskpulse.db")

    # Credentials
    SECRET_KEY = os.getenv("SECRET_KEY", "taskpulse-dev-secret")
    REFRESH_SECRET_KEY = os.getenv("REFRESH_SECRET_KEY", "taskpulse-dev-refresh-secret")
    ALGORITHM = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 24 * 60))
    REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", 7))
    SECURE_COOKIES = os.getenv("SECURE_COOKIES", "false").lower() == "true"

    # Outgoing mail
    SMTP = {
        "host": os.getenv("SMTP_HOST"),
        "port": int(os.getenv("SMTP_PORT", 587)),
        "user": os.getenv("SMTP_USER"),
        "password": os.getenv("SMTP_PASS"),
        "from_email": os.getenv("FROM_EMAIL"),
        "from_name": os.getenv("FROM_NAME", "Task Pulse"),
        "timeout": int(os.getenv("SMTP_TIMEOUT", 8)),
    }

    # Notification queue
    NOTIFY_QUEUE_SIZE = int(os.getenv("NOTIFY_QUEUE_SIZE", 1000))

    # HTTP
    CORS_ORIGINS = _split(os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    @classmethod
    def smtp_configured(cls) -> bool:
        """True when every setting needed to send mail is present"""
        required = ("host", "user", "password", "from_email")
        return all(cls.SMTP[key] for key in required)

    @classmethod
    def is_sqlite(cls) -> bool:
        return cls.DATABASE_URL.startswith("sqlite")


settings = Settings()
