import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from sqlalchemy.engine import URL

load_dotenv()


@dataclass
class Settings:
    # Server
    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "3000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Database (PostgreSQL credentials, or a full DATABASE_URL override)
    db_user: Optional[str] = os.getenv("DB_USER")
    db_host: Optional[str] = os.getenv("DB_HOST")
    db_name: Optional[str] = os.getenv("DB_NAME")
    db_password: Optional[str] = os.getenv("DB_PASSWORD")
    db_port: int = int(os.getenv("DB_PORT", "5432"))
    database_url_override: Optional[str] = os.getenv("DATABASE_URL")

    # Open Library
    openlibrary_url: str = os.getenv("OPENLIBRARY_URL", "https://openlibrary.org")
    covers_url: str = os.getenv("COVERS_URL", "https://covers.openlibrary.org")
    openlibrary_timeout: float = float(os.getenv("OPENLIBRARY_TIMEOUT", "5.0"))

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        if self.db_host:
            return URL.create(
                "postgresql+asyncpg",
                username=self.db_user,
                password=self.db_password,
                host=self.db_host,
                port=self.db_port,
                database=self.db_name,
            ).render_as_string(hide_password=False)
        return "sqlite+aiosqlite:///./books.db"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


settings = Settings()
