"""
Application settings.

Defaults reproduce the classic battle setup (10 minutes per side, engine thinks 0.8 - 1.5 seconds, picks among its top 3 moves).
Every field can be overridden with an environment variable: the field name in upper case, prefixed with CHESS_BATTLE_
ex) CHESS_BATTLE_INITIAL_CLOCK_SECONDS=300
"""

import os
from functools import lru_cache
from typing import Mapping, Self

from pydantic import BaseModel, field_validator, model_validator

ENV_PREFIX = "CHESS_BATTLE_"


class Settings(BaseModel):
    database_url: str = "sqlite:///./chess_battle.db"
    log_level: str = "INFO"
    initial_clock_seconds: float = 600.0
    thinking_delay_min: float = 0.8
    thinking_delay_max: float = 1.5
    engine_top_n: int = 3

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    @field_validator("initial_clock_seconds")
    @classmethod
    def validate_clock(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("initial_clock_seconds must be positive")
        return value

    @field_validator("engine_top_n")
    @classmethod
    def validate_top_n(cls, value: int) -> int:
        if value < 1:
            raise ValueError("engine_top_n must be at least 1")
        return value

    @model_validator(mode="after")
    def validate_thinking_delay(self) -> Self:
        if not 0 <= self.thinking_delay_min <= self.thinking_delay_max:
            raise ValueError(
                f"Thinking delay range is invalid: [{self.thinking_delay_min}, {self.thinking_delay_max}]"
            )
        return self

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = os.environ) -> Self:
        """Collect the overrides present in the environment. Pydantic takes care of the type conversion."""
        overrides = {
            name: environ[f"{ENV_PREFIX}{name.upper()}"]
            for name in cls.model_fields
            if f"{ENV_PREFIX}{name.upper()}" in environ
        }
        return cls(**overrides)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
