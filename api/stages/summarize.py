"""Stage 3 — Summarize the transcript with an OpenAI-compatible chat model.

A failure here never fails the request: the summary field carries the error
text instead and the transcription is still returned.
"""

import logging

from config import Settings
from errors import ConfigurationError

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = "Summarize the transcript below into a concise summary (<= 3 sentences):\n\n{transcription}"
PREVIEW_CHARS = 400


def build_prompt(transcription: str) -> str:
    return PROMPT_TEMPLATE.format(transcription=transcription)


def _first_choice_text(response) -> str:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content if isinstance(content, str) else ""


class Summarizer:
    """Wraps a chat-completions client and a model id."""

    def __init__(self, client, model: str):
        self.client = client
        self.model = model

    def summarize(self, transcription: str) -> str:
        """Return a summary of at most three sentences, or diagnostic text on failure."""
        logger.info("Calling chat completion (%s)", self.model)
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": build_prompt(transcription)}],
            )
            summary = _first_choice_text(response)
        except Exception as e:
            logger.error("Summary error: %s", e)
            return f"Error generating summary: {e}"

        logger.info("Summary (trunc): %s", summary[:PREVIEW_CHARS])
        return summary


def build_summarizer(settings: Settings) -> Summarizer:
    """Summarizer against SUMMARY_BASE_URL (Hugging Face router by default), keyed by HF_TOKEN."""
    if not settings.hf_token:
        raise ConfigurationError("HF_TOKEN is not configured.")

    from openai import OpenAI

    client = OpenAI(api_key=settings.hf_token, base_url=settings.summary_base_url)
    return Summarizer(client, settings.summary_model)
