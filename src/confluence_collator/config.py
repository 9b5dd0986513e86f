import json
from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    confluence_wiki_url: str
    confluence_username: str
    confluence_password: SecretStr

    # Either a JSON list or a comma-separated string in the environment
    confluence_spaces: Annotated[List[str], NoDecode] = []

    # Ceiling on simultaneous page-detail requests
    confluence_parallelism_limit: int = Field(default=15, ge=1)

    # When set, spaces are resolved from catalog Resource entities instead
    catalog_base_url: Optional[str] = None
    catalog_token: Optional[SecretStr] = None

    collator_api_key: Optional[SecretStr] = None

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

    @field_validator("confluence_wiki_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("confluence_spaces", mode="before")
    @classmethod
    def _split_spaces(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("["):
                return json.loads(v)
            return [item.strip() for item in v.split(",") if item.strip()]
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
