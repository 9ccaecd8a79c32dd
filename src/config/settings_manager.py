"""Settings manager with runtime configuration support.

This module provides a centralized settings broker that can:
- Load from environment variables
- Be modified at runtime
- Validate settings
- Support different environments (dev, test, prod)

These are process settings (where the database lives, table names, logging).
Panel settings persisted in the database are handled by ``src.settings``.
"""

import os
from dataclasses import asdict, dataclass
from enum import Enum
from threading import Lock
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


@dataclass
class Settings:
    """Base class for settings dataclasses."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return asdict(self)


@dataclass
class ApplicationSettings(Settings):
    """Application-level settings."""

    name: str = "panel-settings"
    version: str = "test"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True
    log_level: str = "DEBUG"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["environment"] = self.environment.value  # Convert Enum to string
        return data


@dataclass
class StorageSettings(Settings):
    """Storage-related settings."""

    table_name_settings: str = "settings"
    table_name_inbounds: str = "inbounds"


@dataclass
class DatabaseSettings(Settings):
    """Database connection settings."""

    url: str = "sqlite:///x-ui.db"
    echo: bool = False


class SettingsManager:
    """Centralized settings manager with runtime configuration support.

    Usage:
        # Get instance
        settings = SettingsManager.get_instance()

        # Access settings
        db_url = settings.database.url

        # Update at runtime
        settings.database.echo = True
    """

    _instance: Optional["SettingsManager"] = None
    _lock: Lock = Lock()

    def __init__(self):
        """Initialize settings manager.

        Note: Use get_instance() instead of direct instantiation.
        """
        self.application = ApplicationSettings()
        self.storage = StorageSettings()
        self.database = DatabaseSettings()
        self._change_lock = Lock()

    @classmethod
    def get_instance(cls) -> "SettingsManager":
        """Get or create the singleton instance using double-checked locking.

        Returns:
            SettingsManager instance
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
                    cls._instance.load_from_env()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (mainly for testing)."""
        with cls._lock:
            cls._instance = None

    def load_from_env(self, prefix: str = "") -> None:
        """Load settings from environment variables.

        Args:
            prefix: Optional prefix for environment variables (e.g., "XUI_")
        """
        with self._change_lock:

            env_vars = os.environ

            logger.info(
                "Loading settings from environment variables" + (f" with prefix={prefix}" if prefix else "")
            )

            # Application settings
            app_mapping = {
                f"{prefix}APP_NAME": "name",
                f"{prefix}APP_VERSION": "version",
                f"{prefix}APP_ENVIRONMENT": "environment",
                f"{prefix}APP_DEBUG": "debug",
                f"{prefix}APP_LOG_LEVEL": "log_level",
            }

            for env_key, attr_name in app_mapping.items():
                if env_key in env_vars:
                    value = env_vars[env_key]
                    if attr_name == "environment":
                        value = Environment(value.lower())
                    elif attr_name == "debug":
                        value = value.lower() in ["true", "1", "yes"]
                    elif attr_name == "log_level":
                        value = value.upper()
                    setattr(self.application, attr_name, value)

            # Storage settings
            storage_mapping = {
                f"{prefix}TABLE_NAME_SETTINGS": "table_name_settings",
                f"{prefix}TABLE_NAME_INBOUNDS": "table_name_inbounds",
            }

            for env_key, attr_name in storage_mapping.items():
                if env_key in env_vars:
                    setattr(self.storage, attr_name, env_vars[env_key])

            # Database settings
            db_mapping = {
                f"{prefix}DATABASE_URL": "url",
                f"{prefix}DATABASE_ECHO": "echo",
            }

            for env_key, attr_name in db_mapping.items():
                if env_key in env_vars:
                    value = env_vars[env_key]
                    if attr_name == "echo":
                        value = value.lower() in ["true", "1", "yes"]
                    setattr(self.database, attr_name, value)

            logger.info("Settings successfully loaded from environment")

    def export_settings(self, mask_secrets: bool = True) -> Dict[str, Any]:
        """Export all settings as a dictionary.

        Args:
            mask_secrets: If True, mask the password embedded in the database URL

        Returns:
            Dictionary containing all settings
        """
        settings = {
            "application": self.application.to_dict(),
            "storage": self.storage.to_dict(),
            "database": self.database.to_dict(),
        }

        if mask_secrets and self.database.url:
            try:
                url = make_url(self.database.url)
            except ArgumentError:
                settings["database"]["url"] = "***MASKED***"
            else:
                if url.password:
                    settings["database"]["url"] = url.render_as_string(hide_password=True)

        return settings

    def validate(self) -> Dict[str, List[str]]:
        """Validate current settings.

        Returns:
            Dictionary with validation errors by category
        """
        errors: Dict[str, List[str]] = {
            "application": [],
            "storage": [],
            "database": [],
        }

        # Application validation
        if not self.application.name:
            errors["application"].append("Application name is required")
        if self.application.log_level not in [
            "TRACE",
            "DEBUG",
            "INFO",
            "SUCCESS",
            "WARNING",
            "ERROR",
            "CRITICAL",
        ]:
            errors["application"].append("Invalid log level")

        # Storage validation
        if not self.storage.table_name_settings:
            errors["storage"].append("Settings table name is required")
        if not self.storage.table_name_inbounds:
            errors["storage"].append("Inbounds table name is required")
        if self.storage.table_name_settings == self.storage.table_name_inbounds:
            errors["storage"].append("Settings and inbounds tables must differ")

        # Database validation
        if not self.database.url:
            errors["database"].append("Database URL is required")
        else:
            try:
                make_url(self.database.url)
            except ArgumentError:
                errors["database"].append("Database URL is not a valid SQLAlchemy URL")

        # Remove empty error lists
        errors = {k: v for k, v in errors.items() if v}

        return errors

    def is_development(self) -> bool:
        """Check if current environment is development."""
        return self.application.environment == Environment.DEVELOPMENT

    def is_testing(self) -> bool:
        """Check if current environment is testing."""
        return self.application.environment == Environment.TESTING

    def is_production(self) -> bool:
        """Check if current environment is production."""
        return self.application.environment == Environment.PRODUCTION


# Convenience function for global access
def get_settings() -> SettingsManager:
    """Get the global settings manager instance.

    Returns:
        SettingsManager singleton instance
    """
    return SettingsManager.get_instance()
