"""
Settings for the LLM output repair engine.
Uses Pydantic Settings for env management. Nothing here touches the network.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings
from pydantic import ConfigDict, field_validator, Field
from typing import Any, Dict
import os
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)

MIN_CONTEXT_LOOKBACK = 100
MAX_CONTEXT_LOOKBACK = 500

# Settings field -> RepairConfig field
_OVERRIDE_FIELDS = {
    "repair_max_diagnostics": "max_diagnostics",
    "repair_max_passes": "max_passes",
    "repair_context_lookback": "context_lookback",
    "repair_preflight": "preflight_enabled",
    "repair_log_diagnostics": "log_diagnostics",
}


def load_environment_config():
    """
    Load env based on APP_ENV.
    Priority: Existing ENV vars -> .env.{APP_ENV} -> .env.development -> .env
    """
    app_env = os.getenv("APP_ENV", "development")
    env_file_path = f".env.{app_env}"

    logger.debug("Initializing repair environment: %s", app_env)

    if os.path.exists(env_file_path):
        logger.debug("Loading environment from: %s", env_file_path)
        load_dotenv(dotenv_path=env_file_path, override=False)  # Don't override existing env vars
    else:
        fallback = ".env.development"
        if os.path.exists(fallback):
            logger.debug("Environment file %s not found, falling back to: %s", env_file_path, fallback)
            load_dotenv(dotenv_path=fallback, override=False)
            app_env = "development"

    base = ".env"
    if os.path.exists(base):
        load_dotenv(dotenv_path=base, override=False)

    return app_env, env_file_path


app_env, env_file_path = load_environment_config()


class Settings(BaseSettings):
    """
    Repair engine settings with env var support and field aliases.
    """

    model_config = ConfigDict(
        env_file=[env_file_path, ".env"] if os.path.exists(env_file_path) else [".env"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Repair behaviour
    repair_enabled: bool = Field(default=os.getenv("REPAIR_ENABLED", "true").lower() == "true", alias="REPAIR_ENABLED")
    repair_profile: str = Field(default=os.getenv("REPAIR_PROFILE", "standard"), alias="REPAIR_PROFILE")
    repair_max_diagnostics: int = Field(default=int(os.getenv("REPAIR_MAX_DIAGNOSTICS", "10")), alias="REPAIR_MAX_DIAGNOSTICS")
    repair_max_passes: int = Field(default=int(os.getenv("REPAIR_MAX_PASSES", "10")), alias="REPAIR_MAX_PASSES")
    repair_context_lookback: int = Field(default=int(os.getenv("REPAIR_CONTEXT_LOOKBACK", "200")), alias="REPAIR_CONTEXT_LOOKBACK")
    repair_preflight: bool = Field(default=os.getenv("REPAIR_PREFLIGHT", "true").lower() == "true", alias="REPAIR_PREFLIGHT")
    repair_log_diagnostics: bool = Field(default=os.getenv("REPAIR_LOG_DIAGNOSTICS", "false").lower() == "true", alias="REPAIR_LOG_DIAGNOSTICS")

    @field_validator("repair_max_diagnostics", "repair_max_passes")
    @classmethod
    def at_least_one(cls, v: int) -> int:
        return max(1, v)

    @field_validator("repair_context_lookback")
    @classmethod
    def clamp_lookback(cls, v: int) -> int:
        return min(MAX_CONTEXT_LOOKBACK, max(MIN_CONTEXT_LOOKBACK, v))

    @field_validator("repair_profile")
    @classmethod
    def normalize_profile(cls, v: str) -> str:
        return v.strip().lower()

    def get_repair_overrides(self) -> Dict[str, Any]:
        """
        Repair settings that were explicitly provided (env vars or .env files),
        keyed by RepairConfig field name. Unset fields leave the profile alone.
        """
        overrides = {}
        for field_name, config_name in _OVERRIDE_FIELDS.items():
            if field_name in self.model_fields_set:
                overrides[config_name] = getattr(self, field_name)
        return overrides


# One global settings instance
settings = Settings()
