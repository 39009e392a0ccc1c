"""
cloud_sdk_core/utils/settings.py

WHAT THIS FILE IS FOR
---------------------
This module defines the *single source of truth* for runtime configuration
of a service client built on cloud_sdk_core.

It is responsible for:
- Defining all supported configuration fields (via Pydantic BaseSettings)
- Reading defaults from parameters/parameters.yaml as a settings source
- Letting environment variables (CLOUD_SDK_*) override those defaults
- Exposing a cached Settings object with a service URL guaranteed

LOAD & PRECEDENCE MODEL
-----------------------
Sources, highest priority first:

1) Keyword arguments passed to Settings(...)
2) Environment variables:
       CLOUD_SDK_*
3) YAML defaults from:
       parameters/parameters.yaml

pydantic-settings merges the sources; ParametersYamlSource only has to
turn the YAML file into a dict.

BaseService falls back to get_settings() when it is not handed a
Settings object; tests and multi-service apps pass their own.

WHAT THIS FILE IS NOT FOR
-------------------------
This module is NOT responsible for:
- HTTP calls
- Credentials / token management
- Request assembly
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type

import structlog
import yaml
from pydantic import AnyHttpUrl, Field
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

logger = structlog.get_logger(__name__)

PARAMETERS_PATH = Path(__file__).resolve().parents[2] / "parameters" / "parameters.yaml"


class ParametersYamlSource(PydanticBaseSettingsSource):
    """
    Lowest-priority settings source backed by parameters.yaml.

    A missing, unreadable or non-mapping file contributes nothing.
    """

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        # values are provided in bulk by __call__
        return None, field_name, False

    def __call__(self) -> Dict[str, Any]:
        path = PARAMETERS_PATH
        if not path.exists():
            logger.warning("parameters_yaml_missing", expected=str(path))
            return {}

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error("parameters_yaml_load_error", path=str(path), error=str(exc))
            return {}

        if not isinstance(data, dict):
            logger.warning("parameters_yaml_not_dict", path=str(path), type=type(data).__name__)
            return {}

        known = set(self.settings_cls.model_fields)
        return {k: v for k, v in data.items() if k in known}


class Settings(BaseSettings):
    """
    Runtime settings for a cloud service client.

    Precedence: init kwargs > CLOUD_SDK_* env > parameters.yaml > defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="CLOUD_SDK_",
        extra="ignore",
    )

    service_name: str = "cloud_service"
    log_level: str = "INFO"

    # Optional on the model so services can set it later;
    # required by get_settings().
    service_url: Optional[AnyHttpUrl] = None

    # Transport
    # - http_timeout_seconds: connect + read timeout per request
    # - max_retries: async path only (attempts = max_retries + 1)
    http_timeout_seconds: float = 60.0
    max_retries: int = 2
    disable_ssl_verification: bool = Field(
        default=False,
        description="If true, TLS certificates are not verified. Local testing only.",
    )

    user_agent: str = Field(
        default="cloud-sdk-core-python",
        description="Sent as User-Agent on every request unless a request overrides it.",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, ParametersYamlSource(settings_cls)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Process-wide Settings (cached).

    Raises RuntimeError when no service_url is configured anywhere.
    """
    settings = Settings()

    if settings.service_url is None:
        logger.error("settings_missing_service_url", yaml_path=str(PARAMETERS_PATH))
        raise RuntimeError(
            "Missing required setting: service_url. "
            "Set it either in the CLOUD_SDK_SERVICE_URL environment variable "
            f"or in {PARAMETERS_PATH}."
        )

    logger.info(
        "settings_loaded",
        service_name=settings.service_name,
        service_url=str(settings.service_url),
        http_timeout_seconds=settings.http_timeout_seconds,
        max_retries=settings.max_retries,
        disable_ssl_verification=settings.disable_ssl_verification,
    )
    return settings
