# safetool/core/config.py
import base64
import hashlib
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./safetool.db"

    # Secreto de firma JWT. Admite "base64:<...>"; si la clave queda bajo
    # 32 bytes se deriva con SHA-256.
    AUTH_SECRET: str = "dev-secret-please-change"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 8 * 60

    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:4200",
    ]

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",  # no falla si agregas más variables en .env
    )

    @property
    def signing_key(self) -> bytes:
        secret = self.AUTH_SECRET
        if secret.lower().startswith("base64:"):
            key = base64.b64decode(secret[7:])
        else:
            key = secret.encode("utf-8")
        if len(key) < 32:
            key = hashlib.sha256(key).digest()
        return key


settings = Settings()
