"""Binary runner — resolve, probe and execute ffmpeg."""

import logging
import subprocess
import tempfile
from dataclasses import dataclass
from typing import IO, Optional, Sequence

from errors import BinaryUnavailable, ExecutionFailed

logger = logging.getLogger(__name__)

DEFAULT_MAX_OUTPUT_BYTES = 200 * 1024 * 1024  # 200 MiB
VERSION_CHECK_TIMEOUT = 5.0


def _bundled_ffmpeg() -> Optional[str]:
    """Path of the ffmpeg executable shipped with imageio-ffmpeg, if any."""
    import imageio_ffmpeg

    try:
        return imageio_ffmpeg.get_ffmpeg_exe()
    except RuntimeError as e:
        logger.info("No bundled ffmpeg binary: %s", e)
        return None


def resolve_ffmpeg_binary(override: Optional[str] = None) -> str:
    """Pick the ffmpeg binary: explicit override, then bundled, then PATH."""
    if override:
        return override
    return _bundled_ffmpeg() or "ffmpeg"


@dataclass(frozen=True)
class BinaryResult:
    returncode: int
    stdout: str
    stderr: str


def _read_capped(stream: IO[bytes], limit: int) -> tuple[str, bool]:
    """Read back a captured stream, reporting whether it went over the limit."""
    size = stream.seek(0, 2)
    stream.seek(0)
    data = stream.read(limit)
    return data.decode("utf-8", errors="replace"), size > limit


class BinaryRunner:
    """Runs one external executable with an argument vector (never a shell)."""

    def __init__(self, binary: str):
        self.binary = binary

    def check_available(self, timeout: float = VERSION_CHECK_TIMEOUT) -> None:
        """Raise BinaryUnavailable unless `<binary> -version` exits cleanly."""
        try:
            subprocess.run(
                [self.binary, "-version"],
                capture_output=True,
                check=True,
                timeout=timeout,
            )
        except (OSError, subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
            logger.error("ffmpeg check failed for %s: %s", self.binary, e)
            raise BinaryUnavailable(f"ffmpeg not found or not executable: {self.binary}") from e

    def run(
        self,
        args: Sequence[str],
        timeout: Optional[float] = None,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
    ) -> BinaryResult:
        """Run the binary with `args`.

        stdout and stderr are spooled to OS temp files rather than held in
        memory, then read back up to `max_output_bytes` each.

        Raises:
            ExecutionFailed: non-zero exit, timeout, start failure, or output
                over the ceiling. Carries the captured stderr.
        """
        cmd = [self.binary, *args]
        logger.info("Running %s", " ".join(cmd))

        with tempfile.TemporaryFile() as out, tempfile.TemporaryFile() as err:
            try:
                completed = subprocess.run(cmd, stdout=out, stderr=err, timeout=timeout)
            except subprocess.TimeoutExpired as e:
                stderr, _ = _read_capped(err, max_output_bytes)
                raise ExecutionFailed(f"timed out after {timeout}s", stderr=stderr) from e
            except OSError as e:
                raise ExecutionFailed(str(e), stderr=str(e)) from e

            stdout, stdout_over = _read_capped(out, max_output_bytes)
            stderr, stderr_over = _read_capped(err, max_output_bytes)

        if stdout_over or stderr_over:
            raise ExecutionFailed(
                f"output exceeded {max_output_bytes} bytes",
                stderr=stderr,
            )

        if completed.returncode != 0:
            raise ExecutionFailed(
                f"exited with status {completed.returncode}",
                stderr=stderr,
            )

        return BinaryResult(returncode=completed.returncode, stdout=stdout, stderr=stderr)
