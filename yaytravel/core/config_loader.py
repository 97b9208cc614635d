# yaytravel/core/config_loader.py

from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    JWT_SECRET_KEY: str = "supersecret"
    access_token_expire_minutes: int = 1440
    DB_PATH: str = "data.sqlite3"
    environment: str = "development"
    cors_origins: List[str] = ["*"]

    # Remote endpoints used by the client toolkit
    BACKEND_BASE_URL: str = "http://localhost:8000"
    STATUS_BASE_URL: str = "http://localhost:8000/status"
    TITLE_API_URL: str = "https://waitlist-api-534113739138.europe-west1.run.app/generate-title"
    status_poll_interval_seconds: float = 3.0
    request_timeout: float = 20.0

    # Conversational voice agent
    ELEVENLABS_API_KEY: str = ""
    AGENT_ID: str = ""
    VOICE_WS_URL: str = "wss://api.elevenlabs.io/v1/convai/conversation"

    TOKEN_FILE: str = "~/.yaytravel/token.json"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
