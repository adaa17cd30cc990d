"""Application configuration."""
from collections import Counter
from functools import lru_cache
import math
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # App
    app_name: str = "PPR Blog"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Database
    database_url: str = "sqlite:///./data/pprblog.db"
    seed_demo_data: bool = False
    sweep_expired_sessions_on_startup: bool = True

    # Paths
    base_dir: Path = Path(__file__).parent
    seed_file: Path = base_dir / "seed_data" / "demo.yaml"

    # Auth
    secret_key: str
    algorithm: str = "HS256"
    bcrypt_rounds: int = 12
    session_expire_days: int = 7
    session_cookie_name: str = "auth-token"
    session_cookie_path: str = "/"
    session_cookie_samesite: str = "lax"

    @property
    def cookie_secure(self) -> bool:
        """Only mark the session cookie Secure in production."""
        return self.environment == "production"

    @property
    def session_max_age(self) -> int:
        return self.session_expire_days * 24 * 60 * 60

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, value: str) -> str:
        """Fail closed if SECRET_KEY is weak or placeholder quality."""
        if not value:
            raise ValueError("SECRET_KEY must be set.")

        if len(value) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")

        weak_values = {"your-secret-key-change-in-production", "secret", "password", "test"}
        lowered = value.lower()
        if lowered in weak_values or "changeme" in lowered or "change-in-production" in lowered:
            raise ValueError("SECRET_KEY must not be a placeholder value.")

        counts = Counter(value)
        entropy_per_char = -sum((count / len(value)) * math.log2(count / len(value)) for count in counts.values())
        estimated_entropy_bits = entropy_per_char * len(value)
        if estimated_entropy_bits < 100:
            raise ValueError("SECRET_KEY entropy is too low; use a cryptographically random value.")

        return value

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, value: int) -> int:
        if not 4 <= value <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31.")
        return value


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
