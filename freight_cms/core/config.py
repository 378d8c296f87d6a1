"""
Configuration management for the freight CMS portal client.

Handles loading and accessing:
- Business configuration (config.yaml)
- Environment variables (.env)
"""

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from freight_cms.data.models.enums import PortalRole


class PollingConfig(BaseModel):
    """Refresh intervals for each portal dashboard, in seconds."""

    admin_seconds: float = 5.0
    driver_statement_seconds: float = 3.0
    driver_waiting_seconds: float = 5.0


class PaginationConfig(BaseModel):
    """Default and allowed page sizes for paginated tables."""

    default_limit: int = 10
    allowed_limits: list[int] = Field(default_factory=lambda: [10, 25, 50, 100])


class EnvironmentSettings(BaseSettings):
    """Environment variables configuration."""

    # Backend
    api_base_url: str = Field("http://localhost:3000/api", alias="CMS_API_BASE_URL")
    request_timeout: Optional[float] = Field(None, alias="CMS_REQUEST_TIMEOUT")

    # Persistent token storage (one key per portal role)
    token_file: str = Field("./data/session/tokens.json", alias="CMS_TOKEN_FILE")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(True, alias="LOG_JSON")

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


class ConfigManager:
    """
    Central configuration manager for the portal client.

    Loads and provides access to:
    - Business configuration from config/config.yaml
    - Environment variables from .env
    """

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_dir: Optional path to config directory. Defaults to project root/config.
        """
        if config_dir is None:
            project_root = Path(__file__).parent.parent.parent
            config_dir = project_root / "config"

        self.config_dir = config_dir
        self._business_config: Optional[dict[str, Any]] = None
        self._env_settings: Optional[EnvironmentSettings] = None

    @property
    def business_config(self) -> dict[str, Any]:
        """Load and return business configuration from config.yaml.

        A missing file yields an empty configuration so every accessor falls
        back to its defaults.
        """
        if self._business_config is None:
            config_path = self.config_dir / "config.yaml"
            if config_path.exists():
                with open(config_path, "r") as f:
                    self._business_config = yaml.safe_load(f) or {}
            else:
                self._business_config = {}
        return self._business_config

    @property
    def env(self) -> EnvironmentSettings:
        """Load and return environment settings."""
        if self._env_settings is None:
            self._env_settings = EnvironmentSettings()
        return self._env_settings

    def get_company_info(self) -> dict[str, Any]:
        """Get company information from business config."""
        return self.business_config.get("company", {})

    def get_locale(self) -> str:
        """Get the display locale (only pt-BR formatting is implemented)."""
        return self.business_config.get("locale", "pt-BR")

    def get_polling_config(self) -> PollingConfig:
        """Get dashboard polling intervals."""
        return PollingConfig(**self.business_config.get("polling", {}))

    def get_pagination_config(self) -> PaginationConfig:
        """Get table pagination defaults."""
        return PaginationConfig(**self.business_config.get("pagination", {}))

    def get_storage_key(self, role: PortalRole) -> str:
        """
        Get the persistent storage key holding a portal's bearer token.

        Args:
            role: Portal role

        Returns:
            Storage key (e.g., "admin_token")
        """
        storage_keys = self.business_config.get("storage_keys", {})
        return storage_keys.get(role.value, f"{role.value}_token")


# Global config instance
_config_manager: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """
    Get the global configuration manager instance.

    Returns:
        ConfigManager singleton instance
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager
