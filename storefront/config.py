"""
Configuration module for the licence storefront
"""

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Storefront server
    host: str = "0.0.0.0"
    port: int = 3000
    storefront_url: str = "http://localhost:3000"

    # Licence / payment host
    licence_api_host: str = "0.0.0.0"
    licence_api_port: int = 5080
    licence_api_url: str = "http://localhost:5080"
    auth_api_base_url: str = "https://api.example.com"
    pay_base_url: str = "http://localhost:5080"
    licence_id: str = "lic-std-001"

    # Security
    jwt_secret: str = "dev-secret-change-me"
    activation_rate_limit: str = "10/minute"

    # CORS
    cors_origins: str = ""

    # Client
    storage_path: str = "~/.storefront/local_storage.json"
    http_timeout: float = 10.0
    activation_delay: float = 1.5
    guard_delay: float = 0.1

    log_level: str = "INFO"

    # Application
    app_name: str = "Licence Storefront"
    app_version: str = "1.0.0"

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        if not self.cors_origins:
            return []
        return [origin.strip() for origin in self.cors_origins.split(",")]


# Global settings instance
settings = Settings()
