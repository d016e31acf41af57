"""Video Digest — Runtime configuration.

Settings are read from the environment (and a local .env) once at startup and
passed into the pipeline from there. Nothing reads os.environ per request.
"""

from typing import Annotated, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "https://ph-team-code-spirit-quick-clip.vercel.app",
    "https://luminal-ai.vercel.app",
]


class Settings(BaseSettings):
    """Effective configuration for one process."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Service credentials
    deepgram_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    hf_token: Optional[str] = None

    # ASR
    transcribe_provider: str = "deepgram"
    asr_model: str = "nova-2"
    asr_language: str = "en"
    asr_timeout_seconds: float = 300.0

    # Summarization (any OpenAI-compatible endpoint)
    summary_model: str = "NousResearch/Hermes-3-Llama-3.1-8B"
    summary_base_url: str = "https://router.huggingface.co/v1"

    # ffmpeg and temp files
    ffmpeg_path: Optional[str] = None
    ffmpeg_timeout_seconds: Optional[float] = None
    tmp_dir: Optional[str] = None

    # HTTP
    cors_origins: Annotated[list[str], NoDecode] = Field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    port: int = 3002

    @field_validator("deepgram_api_key", "openai_api_key", "hf_token", "ffmpeg_path", "tmp_dir", mode="before")
    @classmethod
    def _blank_is_unset(cls, value):
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("transcribe_provider", mode="before")
    @classmethod
    def _normalize_provider(cls, value):
        if isinstance(value, str):
            return value.strip().lower() or "deepgram"
        return value

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        """CORS_ORIGINS is a comma-separated list."""
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value


def load_settings(dotenv: bool = True) -> Settings:
    """Build Settings from the environment, reading a local .env first unless `dotenv` is False."""
    if dotenv:
        return Settings()
    return Settings(_env_file=None)
