"""Video Digest — Pydantic data models."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ArtifactKind = Literal["upload", "audio"]


class TempFileHandle(BaseModel):
    """A request-scoped temp file path. The file may not exist yet."""

    model_config = ConfigDict(frozen=True)

    path: Path
    kind: ArtifactKind
    request_id: str


class ProcessResponse(BaseModel):
    """Response from POST /process."""

    transcription: str = Field(description="Transcript returned by the ASR service (may be empty)")
    summary: str = Field(description="Short summary, or diagnostic text if summarization failed")


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: str


class HealthResponse(BaseModel):
    """Response from GET /health."""

    ok: bool
    configured: bool = Field(description="Whether the pipeline was built at startup")
    transcribe_provider: str
    asr_model: str
    summary_model: str
    has_deepgram_key: bool
    has_openai_key: bool
    has_hf_token: bool
    ffmpeg_binary: Optional[str] = None
    ffmpeg_available: bool = False
