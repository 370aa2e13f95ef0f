# app/config.py
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # App
    APP_ENV: Literal["dev", "prod", "staging"] = "dev"
    LOG_LEVEL: str = "INFO"

    # Call logger
    CALL_LOG_SINK: Literal["logging", "stdout"] = "logging"
    CALL_LOG_INDENT: int = 2  # pretty-print width for call records

    # Request context
    TRUST_PROXY_HEADERS: bool = True  # honour X-Forwarded-For and friends

    # read .env and ignore any extra keys so this doesn't break again
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

settings = Settings()
