"""Stage 1 — Extract audio from video using ffmpeg."""

import logging

from errors import ArtifactReadFailed, ExecutionFailed, ExtractionFailed
from models import TempFileHandle
from stages.binary import BinaryRunner

logger = logging.getLogger(__name__)


def ffmpeg_args(video_path: str, wav_path: str) -> list[str]:
    """Arguments that turn any input container into mono 16 kHz s16le WAV."""
    return [
        "-y",                    # overwrite
        "-i", video_path,
        "-vn",                   # drop video
        "-acodec", "pcm_s16le",
        "-ar", "16000",          # 16 kHz
        "-ac", "1",              # mono
        wav_path,
    ]


def extract_audio(
    runner: BinaryRunner,
    video: TempFileHandle,
    audio: TempFileHandle,
    timeout: float | None = None,
) -> TempFileHandle:
    """Convert the uploaded video into the audio artifact.

    Args:
        runner: Runner for the resolved ffmpeg binary.
        video: Handle of the saved upload.
        audio: Handle the WAV is written to (caller owns cleanup).
        timeout: Optional deadline for the ffmpeg run.

    Returns:
        The audio handle.

    Raises:
        ExtractionFailed: If ffmpeg fails, with its stderr as the reason.
    """
    try:
        runner.run(ffmpeg_args(str(video.path), str(audio.path)), timeout=timeout)
    except ExecutionFailed as e:
        raise ExtractionFailed(f"ffmpeg failed: {e.stderr.strip() or e}") from e

    return audio


def read_audio(audio: TempFileHandle) -> bytes:
    """Read the extracted WAV.

    Raises:
        ArtifactReadFailed: If the file is missing or unreadable.
    """
    try:
        return audio.path.read_bytes()
    except OSError as e:
        raise ArtifactReadFailed(f"Failed to read audio: {e}") from e
