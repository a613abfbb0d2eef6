from functools import lru_cache

from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kiroku.simlog.constants import DPS_WINDOW, SPLIT_TAG_SPELL_IDS
from kiroku.simlog.parser import DEFAULT_CONCURRENCY
from kiroku.simlog.resolver import DEFAULT_TIMEOUT


class ParserConfig(BaseModel):
    concurrency: int = DEFAULT_CONCURRENCY
    dps_window: float = DPS_WINDOW
    # Spells bucketed without their tag when pairing casts
    split_tag_spell_ids: list[int] = sorted(SPLIT_TAG_SPELL_IDS)


class ResolverConfig(BaseModel):
    enabled: bool = False  # False = names come straight from log labels
    base_url: str = ""
    timeout: float = DEFAULT_TIMEOUT


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    debug: bool = False
    log_level: str = "INFO"
    parser: ParserConfig = ParserConfig()
    resolver: ResolverConfig = ResolverConfig()

    @model_validator(mode="after")
    def _check_cross_field_deps(self):
        if self.parser.concurrency < 1:
            raise ValueError("PARSER__CONCURRENCY must be >= 1")
        if self.parser.dps_window <= 0:
            raise ValueError("PARSER__DPS_WINDOW must be > 0")
        if self.resolver.enabled and not self.resolver.base_url:
            raise ValueError(
                "RESOLVER__ENABLED=true requires RESOLVER__BASE_URL to be set"
            )
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
