from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    PROJECT_NAME: str = "IntelliHealth"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_DB: str = "intellihealth"
    DATABASE_URL: Optional[str] = None

    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    REDIS_URL: str = "redis://localhost:6379/0"

    # Booking
    SLOT_DURATION_MINUTES: int = 60

    # Generative AI
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_TRIAGE_MODEL: str = "gemini-2.5-flash-lite"
    GEMINI_CHAT_MODEL: str = "gemini-2.5-flash"
    AI_TIMEOUT_SECONDS: float = 30.0

    # Medical report storage
    REPORTS_STORAGE_DIR: str = "./storage/medical-reports"
    MAX_REPORT_SIZE_BYTES: int = 10 * 1024 * 1024

    # Video calls
    VIDEO_DOMAIN: str = "meet.jit.si"
    VIDEO_ROOM_PREFIX: str = "intellihealth"

    class Config:
        case_sensitive = True
        env_file = ".env"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if not self.DATABASE_URL:
            self.DATABASE_URL = f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}/{self.POSTGRES_DB}"

settings = Settings()
