"""Video Digest — Pipeline orchestrator.

Runs the processing pipeline synchronously for one request:
  upload → temp video → audio → transcript → summary → cleanup
"""

import logging
import uuid
from typing import Optional

from config import Settings
from models import ProcessResponse
from stages.artifacts import TempArtifactManager, safe_extension
from stages.audio import extract_audio, read_audio
from stages.binary import BinaryRunner, resolve_ffmpeg_binary
from stages.summarize import Summarizer, build_summarizer
from stages.transcribe import build_transcriber, transcribe

logger = logging.getLogger(__name__)


class VideoPipeline:
    """Holds the clients built at startup; `run` is called once per request."""

    def __init__(
        self,
        runner: BinaryRunner,
        artifacts: TempArtifactManager,
        transcriber,
        summarizer: Summarizer,
        ffmpeg_timeout: Optional[float] = None,
    ):
        self.runner = runner
        self.artifacts = artifacts
        self.transcriber = transcriber
        self.summarizer = summarizer
        self.ffmpeg_timeout = ffmpeg_timeout

    def run(self, video_bytes: bytes, filename: str) -> ProcessResponse:
        """Process one uploaded video.

        Args:
            video_bytes: Raw upload.
            filename: Logical name for the upload; only its suffix is used.

        Returns:
            ProcessResponse with the transcription and the summary (which may be
            diagnostic text if summarization failed).

        Raises:
            PipelineError: If ffmpeg is unavailable, extraction fails, the audio
                cannot be read, or transcription fails. All temp files created
                so far are removed first.
        """
        request_id = uuid.uuid4().hex
        logger.info("[%s] Starting pipeline for %s (%d bytes)", request_id, filename, len(video_bytes))

        logger.info("[%s] Checking ffmpeg binary %s", request_id, self.runner.binary)
        self.runner.check_available()

        with self.artifacts.scoped("upload", safe_extension(filename), request_id) as video:
            video.path.write_bytes(video_bytes)
            logger.info("[%s] Saved upload to %s", request_id, video.path)

            with self.artifacts.scoped("audio", ".wav", request_id) as audio:
                logger.info("[%s] Stage 1: Extracting audio", request_id)
                extract_audio(self.runner, video, audio, timeout=self.ffmpeg_timeout)
                audio_bytes = read_audio(audio)
                logger.info("[%s] Audio extracted to %s (%d bytes)", request_id, audio.path, len(audio_bytes))

                logger.info("[%s] Stage 2: Transcribing audio", request_id)
                transcription = transcribe(self.transcriber, audio_bytes)

            logger.info("[%s] Stage 3: Summarizing transcript", request_id)
            summary = self.summarizer.summarize(transcription)

        logger.info("[%s] Pipeline finished", request_id)
        return ProcessResponse(transcription=transcription, summary=summary)


def build_pipeline(settings: Settings) -> VideoPipeline:
    """Construct the pipeline and its service clients from startup settings.

    Raises:
        ConfigurationError: If a required credential is missing.
    """
    binary = resolve_ffmpeg_binary(settings.ffmpeg_path)
    logger.info("Using ffmpeg binary: %s", binary)

    return VideoPipeline(
        runner=BinaryRunner(binary),
        artifacts=TempArtifactManager(settings.tmp_dir),
        transcriber=build_transcriber(settings),
        summarizer=build_summarizer(settings),
        ffmpeg_timeout=settings.ffmpeg_timeout_seconds,
    )
