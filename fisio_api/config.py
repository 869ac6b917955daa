import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# PostgreSQL (production)
HOST_AZURE = os.getenv("HOST_AZURE", "")
DATABASE_PORT = int(os.getenv("DATABASE_PORT", "5432"))
USER_DB = os.getenv("USER_DB", "")
PASSWORD_DB = os.getenv("PASSWORD_DB", "")
NAME_DB = os.getenv("NAME_DB", "")
DATABASE_SSL = _flag("DATABASE_SSL", "true")
DATABASE_MAX_CONNECTIONS = int(os.getenv("DATABASE_MAX_CONNECTIONS", "5"))

# Alternative DSN, postgresql://... or sqlite:///...
DATABASE_URL = os.getenv("DATABASE_URL", "")
# SQLite file used when no PostgreSQL is configured (local development)
DATABASE_PATH = os.getenv("DATABASE_PATH", "fisio.db")

# Firebase service account used to verify ID tokens
FIREBASE_PROJECT_ID = os.getenv("FIREBASE_PROJECT_ID", "")
FIREBASE_CLIENT_EMAIL = os.getenv("FIREBASE_CLIENT_EMAIL", "")
FIREBASE_PRIVATE_KEY = os.getenv("FIREBASE_PRIVATE_KEY", "").replace("\\n", "\n")

AUTH_REQUIRED = _flag("AUTH_REQUIRED", "true")
# Scope queries by the verified uid instead of the fisio_id sent by the client
FISIO_ID_FROM_TOKEN = _flag("FISIO_ID_FROM_TOKEN", "true")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
