from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    PROJECT_NAME: str = "School Marks & Reports API"
    API_V1_STR: str = "/api/v1"

    # Database
    DATABASE_URL: str = "postgresql://postgres@localhost:5432/school_marks"
    SQL_ECHO: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"

    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:4200",  # admin frontend
        "http://127.0.0.1:4200",
    ]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

settings = Settings()
