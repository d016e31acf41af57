"""Tests for the audio extraction stage."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import MagicMock

from errors import ArtifactReadFailed, ExecutionFailed, ExtractionFailed
from stages.artifacts import TempArtifactManager
from stages.audio import extract_audio, ffmpeg_args, read_audio


def test_ffmpeg_args():
    assert ffmpeg_args("/tmp/in.mp4", "/tmp/out.wav") == [
        "-y",
        "-i", "/tmp/in.mp4",
        "-vn",
        "-acodec", "pcm_s16le",
        "-ar", "16000",
        "-ac", "1",
        "/tmp/out.wav",
    ]


class TestExtractAudio:
    def test_passes_paths_and_timeout(self, tmp_path):
        manager = TempArtifactManager(tmp_path)
        video = manager.allocate("upload", ".mp4", "req")
        audio = manager.allocate("audio", ".wav", "req")
        runner = MagicMock()

        assert extract_audio(runner, video, audio, timeout=30) is audio

        args = runner.run.call_args.args[0]
        assert args[args.index("-i") + 1] == str(video.path)
        assert args[-1] == str(audio.path)
        assert runner.run.call_args.kwargs["timeout"] == 30

    def test_failure_carries_stderr(self, tmp_path):
        manager = TempArtifactManager(tmp_path)
        runner = MagicMock()
        runner.run.side_effect = ExecutionFailed("exited with status 1", stderr="moov atom not found\n")

        with pytest.raises(ExtractionFailed) as exc_info:
            extract_audio(runner, manager.allocate("upload", ".mp4", "r"), manager.allocate("audio", ".wav", "r"))

        assert str(exc_info.value) == "ffmpeg failed: moov atom not found"
        assert isinstance(exc_info.value.__cause__, ExecutionFailed)

    def test_failure_without_stderr_uses_message(self, tmp_path):
        manager = TempArtifactManager(tmp_path)
        runner = MagicMock()
        runner.run.side_effect = ExecutionFailed("timed out after 5s")

        with pytest.raises(ExtractionFailed, match="ffmpeg failed: timed out after 5s"):
            extract_audio(runner, manager.allocate("upload", ".mp4", "r"), manager.allocate("audio", ".wav", "r"))


class TestReadAudio:
    def test_reads_bytes(self, tmp_path):
        audio = TempArtifactManager(tmp_path).allocate("audio", ".wav", "req")
        audio.path.write_bytes(b"RIFF....WAVE")
        assert read_audio(audio) == b"RIFF....WAVE"

    def test_missing_output_is_read_failure(self, tmp_path):
        audio = TempArtifactManager(tmp_path).allocate("audio", ".wav", "req")
        with pytest.raises(ArtifactReadFailed, match="Failed to read audio"):
            read_audio(audio)

    def test_read_failure_is_not_extraction_failure(self, tmp_path):
        audio = TempArtifactManager(tmp_path).allocate("audio", ".wav", "req")
        with pytest.raises(ArtifactReadFailed) as exc_info:
            read_audio(audio)
        assert not isinstance(exc_info.value, ExtractionFailed)
