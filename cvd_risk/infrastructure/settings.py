"""Application Settings and Configuration.

This module provides application-wide settings that combine configuration
from the configuration manager with application-specific defaults.
"""

import os
from typing import Optional

from cvd_risk import __version__
from cvd_risk.infrastructure.config_manager import EngineConfig, get_engine_config

# Application metadata
APP_NAME = "CVD-Risk-Engine"
APP_VERSION = __version__


class Settings:
    """Application settings loaded from the configuration manager and environment.

    The engine configuration is loaded lazily on first access, so tests can
    set ``CVD_*`` variables before anything reads them and call ``reload()``
    afterwards.
    """

    def __init__(self):
        """Initialize settings from environment."""
        self._config: Optional[EngineConfig] = None
        self.app_name = os.getenv("CVD_APP_NAME", APP_NAME)
        self.app_version = APP_VERSION

    @property
    def config(self) -> EngineConfig:
        """Get engine configuration.

        Returns:
            EngineConfig instance loaded from the configuration manager
        """
        if self._config is None:
            self._config = get_engine_config()
        return self._config

    def reload(self) -> EngineConfig:
        """Re-read the engine configuration from the environment."""
        self._config = None
        return self.config

    @property
    def log_level(self) -> str:
        return self.config.log_level

    @property
    def log_json(self) -> bool:
        return self.config.log_json

    @property
    def validate_inputs(self) -> bool:
        return self.config.validate_inputs

    @property
    def advisories_require_score(self) -> bool:
        return self.config.advisories_require_score

    @property
    def csv_chunk_size(self) -> int:
        return self.config.csv_chunk_size


# Global settings instance
settings = Settings()
