from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineConfig(BaseModel):
    """
    Immutable pipeline tunables.

    A plain model: building one never reads the environment. The API layer
    gets its instance from Settings; library callers that pass nothing get
    DEFAULT_CONFIG. Extractors only ever see it through their ExtractionContext.
    """

    model_config = ConfigDict(frozen=True)

    # List caps on extracted fields; configurable downwards only
    skills_cap: int = Field(20, ge=1, le=20)
    requirements_cap: int = Field(10, ge=1, le=10)

    # Email relevance gate and input bounds
    email_relevance_threshold: int = 30
    email_body_max_chars: int = 5000
    email_batch_size: int = 10

    # Multi-pass OCR merging
    merge_top_n: int = 3
    merge_low_word_confidence: float = 75.0
    merge_bbox_threshold_px: float = 30.0
    merge_confidence_gain: float = 20.0

    # Description generation
    description_min_chars: int = 50
    description_max_chars: int = 600


DEFAULT_CONFIG = PipelineConfig()


class Settings(BaseSettings):
    """
    Service settings read from JOBTEXT_* variables and an optional .env file.

    Pipeline tunables are nested: JOBTEXT_PIPELINE__SKILLS_CAP=5.
    """

    pipeline: PipelineConfig = DEFAULT_CONFIG
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="JOBTEXT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def get_pipeline_config() -> PipelineConfig:
    return get_settings().pipeline
