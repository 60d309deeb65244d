"""
Application configuration management using Pydantic Settings.

This module centralizes all environment-based configuration for the application,
providing type-safe access to configuration values with validation.
"""

import os
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
import logging

logger = logging.getLogger('CORE_CONFIG')


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Name of the application
        debug: Debug mode flag

        # Database Configuration
        db_username: PostgreSQL username
        db_password: PostgreSQL password
        db_host: PostgreSQL host
        db_endpoint: AWS RDS endpoint (alternative to db_host)
        db_port: PostgreSQL port
        db_name: PostgreSQL database name
        database_url: Complete database URL (if provided directly)

        # Connection Pool Settings
        db_pool_size: Database connection pool size
        db_max_overflow: Maximum overflow connections
        db_pool_timeout: Pool checkout timeout in seconds
        db_pool_recycle: Connection recycle time in seconds

        # Redis / Celery Configuration
        redis_url: Redis connection URL for the ranking cache
        celery_broker_url: Celery broker URL
        celery_result_backend: Celery result backend URL

        # Scheduling Policy
        imminent_occasion_horizon_days: Lookahead within which an occasion dominates ranking
        interaction_frequency_window_days: Trailing window for the interaction rate
        upcoming_window_default_days: Default window for upcoming occasions
        upcoming_window_max_days: Largest accepted upcoming-occasions window
    """

    # Application Settings
    app_name: str = "Personal CRM"
    debug: bool = False
    environment: str = "development"

    # Database Configuration
    db_username: str = "postgres"
    db_password: Optional[str] = None
    db_host: Optional[str] = None
    db_endpoint: Optional[str] = None  # AWS RDS style
    db_port: str = "5432"
    db_name: Optional[str] = None
    postgres_db: str = "personal_crm"  # Fallback
    database_url: Optional[str] = None

    # Connection Pool Settings
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_pool_timeout: int = 10
    db_pool_recycle: int = 3600
    db_pool_pre_ping: bool = True
    db_echo: bool = False

    # Redis Configuration
    redis_url: str = "redis://redis:6379/0"
    priority_cache_enabled: bool = False
    priority_cache_ttl_seconds: int = 3600

    # Celery Configuration (DB 1 keeps the broker apart from the cache)
    celery_broker_url: str = "redis://redis:6379/1"
    celery_result_backend: str = "redis://redis:6379/1"
    priority_recompute_hour: int = 4

    # Scheduling Policy
    imminent_occasion_horizon_days: int = 7
    interaction_frequency_window_days: int = 365
    upcoming_window_default_days: int = 30
    upcoming_window_max_days: int = 3660
    max_recurring_interval_days: int = 36500
    max_recurring_interval_years: int = 100
    signal_fanout_threshold: int = 500
    signal_workers: int = 8

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",  # Allow extra fields from environment
    )

    def get_database_name(self) -> str:
        """Get the database name from various possible environment variables."""
        return self.db_name or self.postgres_db

    def get_database_host(self) -> str:
        """
        Get database host, parsing DB_ENDPOINT if necessary.

        Returns:
            str: Database host address

        Raises:
            ValueError: If no host configuration is found
        """
        if self.db_endpoint:
            if ':' in self.db_endpoint:
                host, _, port = self.db_endpoint.rpartition(':')
                try:
                    int(port)
                except ValueError:
                    return self.db_endpoint
                # Valid port found, update port if not explicitly set
                if not os.getenv("DB_PORT"):
                    self.db_port = port
                return host
            return self.db_endpoint

        if self.db_host:
            return self.db_host

        raise ValueError("Database host configuration missing (DB_HOST or DB_ENDPOINT)")

    def get_database_url(self) -> str:
        """
        Construct the database URL from components or return direct URL.

        Returns:
            str: PostgreSQL database URL

        Raises:
            ValueError: If required configuration is missing
        """
        if self.database_url:
            return self.database_url

        missing = []
        if not self.db_username:
            missing.append("DB_USERNAME")
        if not self.db_password:
            missing.append("DB_PASSWORD")

        try:
            db_host = self.get_database_host()
        except ValueError:
            missing.append("DB_HOST or DB_ENDPOINT")
            db_host = None

        if missing:
            raise ValueError(f"Database configuration incomplete. Missing: {', '.join(missing)}")

        return f"postgresql://{self.db_username}:{self.db_password}@{db_host}:{self.db_port}/{self.get_database_name()}"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Cached settings object
    """
    return Settings()
