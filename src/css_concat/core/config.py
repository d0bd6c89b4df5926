from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogFormat = Literal["json", "console"]
SourceMapSetting = Literal["inline", "file"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CSS_CONCAT_",
        env_file=".env",
        extra="ignore",
    )

    log_level: str = Field(default="INFO")
    log_format: LogFormat = Field(default="console")

    # None disables the timeout entirely
    http_timeout: float | None = Field(default=None, gt=0)
    user_agent: str = Field(default="css-concat/0.1")

    asset_hash_length: int = Field(default=8, ge=4, le=64)
    source_map: SourceMapSetting = Field(default="inline")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    return Settings()
