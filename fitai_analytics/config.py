"""
Service configuration, read from the environment (and a local .env file)
"""

import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:8080"


class Settings:
    @property
    def service_name(self) -> str:
        return os.getenv("SERVICE_NAME", "fitai-analytics")

    @property
    def app_env(self) -> str:
        return os.getenv("APP_ENV", "local")

    @property
    def log_level(self) -> str:
        return os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def port(self) -> int:
        return int(os.getenv("PORT", 8000))

    @property
    def cors_origins(self) -> list:
        raw = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
        return [origin.strip() for origin in raw.split(",") if origin.strip()]

    @property
    def is_dev(self) -> bool:
        return self.app_env in {"local", "dev"}


settings = Settings()
