from pydantic import BaseModel
import os
from dotenv import load_dotenv
load_dotenv()  # carga el archivo .env de la raíz


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    app_name: str = os.getenv("APP_NAME", "CampusNet")
    env: str = os.getenv("APP_ENV", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    mongodb_uri: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    mongodb_timeout_ms: int = int(os.getenv("MONGODB_TIMEOUT_MS", "5000"))
    db_name: str = os.getenv("DB_NAME", "campusnet")
    jwt_secret: str = os.getenv("JWT_SECRET", "change-me")
    jwt_expires_hours: int = int(os.getenv("JWT_EXPIRES_HOURS", "8"))
    frontend_base_url: str = os.getenv("FRONTEND_BASE_URL", "http://localhost:3000")
    rate_limit_enabled: bool = _env_bool("RATE_LIMIT_ENABLED", "true")

    # Mensajería
    message_max_length: int = int(os.getenv("MESSAGE_MAX_LENGTH", "2000"))
    conversations_page_size: int = int(os.getenv("CONVERSATIONS_PAGE_SIZE", "10"))
    thread_page_size: int = int(os.getenv("THREAD_PAGE_SIZE", "50"))
    max_page_limit: int = int(os.getenv("MAX_PAGE_LIMIT", "100"))


_settings: Settings | None = None
def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
