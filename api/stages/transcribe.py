"""Stage 2 — Transcribe audio via the Deepgram REST API or OpenAI Whisper."""

import logging
from typing import Any, Optional

import httpx

from config import Settings
from errors import ConfigurationError, TranscriptionFailed

logger = logging.getLogger(__name__)

DEEPGRAM_BASE_URL = "https://api.deepgram.com"
PREVIEW_CHARS = 400


def _dig(data: Any, *path: Any) -> Any:
    """Walk nested dicts/lists, returning None at the first missing step."""
    for key in path:
        if isinstance(key, int):
            if not isinstance(data, list) or len(data) <= key:
                return None
        elif not isinstance(data, dict) or key not in data:
            return None
        data = data[key]
    return data


def transcript_from_deepgram(payload: Any) -> str:
    """Pull the first alternative's transcript out of a Deepgram response, or ""."""
    text = _dig(payload, "results", "channels", 0, "alternatives", 0, "transcript")
    return text if isinstance(text, str) else ""


class DeepgramTranscriber:
    """Single prerecorded-audio request against Deepgram /v1/listen."""

    def __init__(
        self,
        api_key: str,
        model: str = "nova-2",
        language: str = "en",
        timeout: float = 300.0,
        client: Optional[httpx.Client] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.language = language
        self.client = client or httpx.Client(base_url=DEEPGRAM_BASE_URL, timeout=timeout)

    def transcribe(self, audio_bytes: bytes) -> str:
        params = {
            "model": self.model,
            "language": self.language,
            "smart_format": "true",
            "punctuate": "true",
        }
        headers = {
            "Authorization": f"Token {self.api_key}",
            "Content-Type": "audio/wav",
        }

        logger.info("Calling Deepgram ASR (%d bytes)", len(audio_bytes))
        try:
            response = self.client.post("/v1/listen", params=params, headers=headers, content=audio_bytes)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise TranscriptionFailed(
                f"ASR failed: Deepgram returned {e.response.status_code}: {e.response.text[:300]}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise TranscriptionFailed(f"ASR failed: {e}") from e

        return transcript_from_deepgram(payload)


class OpenAITranscriber:
    """Transcribe using the OpenAI Whisper API."""

    def __init__(self, client, model: str = "whisper-1", language: str = "en"):
        self.client = client
        self.model = model
        self.language = language

    def transcribe(self, audio_bytes: bytes) -> str:
        from openai import OpenAIError

        logger.info("Calling OpenAI Whisper ASR (%d bytes)", len(audio_bytes))
        try:
            response = self.client.audio.transcriptions.create(
                model=self.model,
                file=("audio.wav", audio_bytes, "audio/wav"),
                language=self.language,
            )
        except OpenAIError as e:
            raise TranscriptionFailed(f"ASR failed: {e}") from e

        text = getattr(response, "text", None)
        return text if isinstance(text, str) else ""


def build_transcriber(settings: Settings):
    """Construct the transcriber for TRANSCRIBE_PROVIDER.

    - deepgram (default): Deepgram REST, needs DEEPGRAM_API_KEY
    - openai: Whisper API, needs OPENAI_API_KEY
    """
    provider = settings.transcribe_provider

    if provider == "deepgram":
        if not settings.deepgram_api_key:
            raise ConfigurationError("DEEPGRAM_API_KEY is not configured.")
        return DeepgramTranscriber(
            api_key=settings.deepgram_api_key,
            model=settings.asr_model,
            language=settings.asr_language,
            timeout=settings.asr_timeout_seconds,
        )
    elif provider == "openai":
        if not settings.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is not configured.")
        from openai import OpenAI

        client = OpenAI(api_key=settings.openai_api_key, timeout=settings.asr_timeout_seconds)
        return OpenAITranscriber(client, language=settings.asr_language)
    else:
        raise ValueError(f"Unknown TRANSCRIBE_PROVIDER: {provider}. Must be 'deepgram' or 'openai'.")


def transcribe(transcriber, audio_bytes: bytes) -> str:
    """Run exactly one ASR call and log a preview of the result.

    Raises:
        TranscriptionFailed: If the remote call itself fails.
    """
    transcription = transcriber.transcribe(audio_bytes)
    logger.info("Transcription (trunc): %s", transcription[:PREVIEW_CHARS])
    return transcription
