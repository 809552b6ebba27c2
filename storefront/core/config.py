"""Storefront Client Configuration"""

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Client settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "GreenShoes Storefront"
    debug: bool = False
    log_level: str = "INFO"

    # Remote API
    api_base_url: str = "http://localhost:4000/api"
    request_timeout: float = 30.0

    # Durable store (survives tab close); in-memory when unset
    storage_path: Optional[str] = None

    # Storage keys
    token_key: str = "greenshoes_token"
    user_key: str = "greenshoes_user"
    guest_id_key: str = "greenshoes_guest_id"

    # Entry points
    home_path: str = "/"
    login_path: str = "/login"
    register_path: str = "/register"

    @property
    def auth_entry_points(self) -> tuple[str, str]:
        """Locations where an authorization failure does not redirect"""
        return (self.login_path, self.register_path)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
