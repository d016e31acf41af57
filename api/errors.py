"""Video Digest — Pipeline error taxonomy.

Everything except ConfigurationError is a fatal pipeline failure that the
HTTP layer reports as a 500. A failed summary is not an error: it is
returned as diagnostic text inside the summary field.
"""


class PipelineError(RuntimeError):
    """Base class for failures that abort a request."""


class BinaryUnavailable(PipelineError):
    """ffmpeg is missing or not executable."""


class ExecutionFailed(PipelineError):
    """A subprocess exited non-zero, timed out, or could not be started."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr


class ExtractionFailed(PipelineError):
    """ffmpeg could not produce audio from the uploaded video."""


class ArtifactReadFailed(PipelineError):
    """ffmpeg reported success but the audio file could not be read."""


class TranscriptionFailed(PipelineError):
    """The remote ASR call failed."""


class ConfigurationError(RuntimeError):
    """Required credentials or settings are missing."""
