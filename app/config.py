import logging
import os
from pathlib import Path
from dotenv import load_dotenv

# Корень проекта
root = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=root / ".env")

DEFAULT_JWT_SECRET = "your-secret-key-change-in-production"

DB_HOST = os.getenv("DB_HOST", "127.0.0.1")
DB_PORT = os.getenv("DB_PORT", "5432")
DB_USER = os.getenv("DB_USER", "postgres")
DB_PASS = os.getenv("DB_PASS", "")
DB_NAME = os.getenv("DB_NAME", "learning")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql+asyncpg://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")
CREATE_TABLES = os.getenv("CREATE_TABLES", "true").lower() in ("1", "true", "yes")

JWT_SECRET = os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET)
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
SESSION_TTL_DAYS = int(os.getenv("SESSION_TTL_DAYS", "7"))

BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

PORT = int(os.getenv("PORT", "3001"))


def setup_logging():
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def get_cors_settings():
    origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    return {
        "allow_origins": [o.strip() for o in origins.split(",") if o.strip()],
        "allow_credentials": True,
        "allow_methods": ["*"],
        "allow_headers": ["*"],
    }


def uses_default_secret() -> bool:
    return JWT_SECRET == DEFAULT_JWT_SECRET
