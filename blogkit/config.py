from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BLOGKIT_", extra="ignore")

    content_dir: Path = Field(
        default=Path("content/blog"),
        description="Directory holding one sub-directory per post slug.",
    )
    default_author: str = Field(
        default="Team",
        description="Author used when a post's front matter omits it.",
    )
    site_url: str = Field(
        default="",
        description="Absolute site origin used in structured data, without a trailing slash.",
    )
    publisher_name: str = "Team"
    rate_limit: str = "60/minute"
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
