"""Tests for the summarization stage."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import MagicMock

from config import Settings
from errors import ConfigurationError
from stages.summarize import Summarizer, build_prompt, build_summarizer


def _completion(*contents):
    return MagicMock(choices=[MagicMock(message=MagicMock(content=c)) for c in contents])


class TestSummarizer:
    def test_single_user_turn_with_prompt(self):
        client = MagicMock()
        client.chat.completions.create.return_value = _completion("A short summary.")

        result = Summarizer(client, "some/model").summarize("we talked about cats")

        assert result == "A short summary."
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "some/model"
        assert kwargs["messages"] == [{"role": "user", "content": build_prompt("we talked about cats")}]

    def test_prompt_embeds_transcript(self):
        prompt = build_prompt("full transcript here")
        assert "<= 3 sentences" in prompt
        assert prompt.endswith("\n\nfull transcript here")

    def test_first_choice_wins(self):
        client = MagicMock()
        client.chat.completions.create.return_value = _completion("first", "second")
        assert Summarizer(client, "m").summarize("t") == "first"

    def test_no_choices_is_empty(self):
        client = MagicMock()
        client.chat.completions.create.return_value = MagicMock(choices=[])
        assert Summarizer(client, "m").summarize("t") == ""

    def test_null_content_is_empty(self):
        client = MagicMock()
        client.chat.completions.create.return_value = _completion(None)
        assert Summarizer(client, "m").summarize("t") == ""

    def test_failure_becomes_diagnostic_text(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = RuntimeError("model is overloaded")

        result = Summarizer(client, "m").summarize("t")

        assert result == "Error generating summary: model is overloaded"


class TestBuildSummarizer:
    def test_requires_hf_token(self):
        with pytest.raises(ConfigurationError, match="HF_TOKEN"):
            build_summarizer(Settings(_env_file=None, hf_token=None))

    def test_uses_configured_endpoint_and_model(self):
        summarizer = build_summarizer(
            Settings(_env_file=None, hf_token="hf_x", summary_base_url="https://example.test/v1", summary_model="org/model")
        )
        assert summarizer.model == "org/model"
        assert str(summarizer.client.base_url).rstrip("/") == "https://example.test/v1"
