"""Configuration Manager for the CVD Risk Engine.

This module loads engine configuration from environment variables (or a
plain mapping) into a validated Pydantic model.

Architecture:
    - Infrastructure layer, isolated from the domain
    - Type-safe configuration using Pydantic models
    - Fail-fast validation prevents runtime surprises

Environment variables (prefix ``CVD_``):
    CVD_LOG_LEVEL                  DEBUG, INFO, WARNING, ERROR, CRITICAL
    CVD_LOG_JSON                   Emit JSON log lines (true/false)
    CVD_VALIDATE_INPUTS            Reject non-positive/non-finite inputs (true/false)
    CVD_ADVISORIES_REQUIRE_SCORE   Skip advisories when no score was produced (true/false)
    CVD_CSV_CHUNK_SIZE             Rows per chunk in batch scoring
"""

import os
import logging
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

ENV_PREFIX = "CVD_"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class EngineConfig(BaseModel):
    """Engine configuration.

    Parameters:
        log_level: Root logging level
        log_json: Use the structured JSON log formatter
        validate_inputs: Reject age <= 0 and non-positive or non-finite
            cholesterol/SBP before scoring. Disable to reproduce raw
            NaN/inf propagation.
        advisories_require_score: Only evaluate advisories when a score
            was produced
        csv_chunk_size: Rows per chunk for CSV batch scoring
    """

    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="JSON log lines")
    validate_inputs: bool = Field(default=True, description="Domain validation of numeric inputs")
    advisories_require_score: bool = Field(default=False, description="Advisories only with a score")
    csv_chunk_size: int = Field(default=10000, gt=0, description="CSV rows per chunk")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize the logging level."""
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unsupported log level: {v}. Supported: {list(_LOG_LEVELS)}")
        return level

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineConfig":
        """Load configuration from ``CVD_*`` environment variables.

        Parameters:
            environ: Mapping to read instead of ``os.environ`` (tests)

        Returns:
            EngineConfig: Validated configuration; unset variables keep their defaults
        """
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw.strip() != "":
                values[name] = raw.strip()

        config = cls(**values)
        logger.debug(f"Loaded engine configuration from environment: {sorted(values)}")
        return config


def get_engine_config() -> EngineConfig:
    """Get engine configuration from the environment."""
    return EngineConfig.from_environment()
