# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
#
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .ln.fuzzy import MAX_JSON_INPUT_SIZE

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class AppSettings(BaseSettings, frozen=True):
    """Package settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".secrets.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    LIONTYPE_LOG_LEVEL: str = Field(
        default="INFO", description="Level of the 'liontype' package logger"
    )

    LIONTYPE_ALLOW_INTEGRAL_FLOAT_AS_INT: bool = Field(
        default=True,
        description="Accept a raw float with no fractional part for an int target",
    )

    LIONTYPE_MAX_RAW_TEXT_SIZE: int = Field(
        default=MAX_JSON_INPUT_SIZE,
        gt=0,
        description="Upper bound on streamed LLM text accumulated per call",
    )

    LIONTYPE_STREAM_WAIT_TIMEOUT: float | None = Field(
        default=None,
        description="Default timeout (seconds) for pull-mode stream waits",
    )

    LIONTYPE_DEFAULT_CLIENT: str | None = Field(
        default=None,
        description="LLM client name used when a call gives no override",
    )

    # Class variable to store the singleton instance
    _instance: ClassVar[Any] = None

    @field_validator("LIONTYPE_LOG_LEVEL")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in _LOG_LEVELS:
            raise ValueError(f"Invalid log level: {value}")
        return value


# Create a singleton instance
settings = AppSettings()
# Store the instance in the class variable for singleton pattern
AppSettings._instance = settings
