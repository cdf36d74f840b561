from typing import List

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./upi_events.db"
    GOOGLE_CLIENT_ID: str = "YOUR_GOOGLE_CLIENT_ID_HERE"
    GOOGLE_CLIENT_SECRET: str = "YOUR_GOOGLE_CLIENT_SECRET_HERE"
    SECRET_KEY: str = "YOUR_SECRET_KEY_HERE"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 8

    # Image storage; files under STORAGE_DIR are served at STORAGE_URL_PREFIX
    STORAGE_DIR: str = "./storage"
    STORAGE_URL_PREFIX: str = "/storage"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # Emails allowed to self-promote to admin (JSON list in the environment)
    ADMIN_EMAILS: List[str] = []

    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    class Config:
        env_file = ".env"

settings = Settings()
