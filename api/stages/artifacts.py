"""Temp artifact manager — request-scoped temp paths with guaranteed cleanup."""

import logging
import os
import re
import secrets
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from models import ArtifactKind, TempFileHandle

logger = logging.getLogger(__name__)

_EXTENSION_RE = re.compile(r"^\.[A-Za-z0-9]{1,8}$")


def safe_extension(filename: Optional[str], default: str = ".mp4") -> str:
    """Suffix of an untrusted upload name, or `default` if it looks odd."""
    if not filename:
        return default
    ext = Path(filename).suffix.lower()
    return ext if _EXTENSION_RE.match(ext) else default


class TempArtifactManager:
    """Hands out unique temp paths and deletes them, best-effort."""

    def __init__(self, base_dir: Optional[Union[str, Path]] = None):
        self.base_dir = Path(base_dir) if base_dir else Path(tempfile.gettempdir())

    def allocate(self, kind: ArtifactKind, extension: str, request_id: str) -> TempFileHandle:
        """Reserve a fresh path. The file itself is not created."""
        name = f"{kind}_{time.time_ns()}_{secrets.token_hex(4)}{extension}"
        return TempFileHandle(path=self.base_dir / name, kind=kind, request_id=request_id)

    def release(self, handle: TempFileHandle) -> None:
        """Delete the handle's file if it exists. Never raises."""
        try:
            os.unlink(handle.path)
            logger.info("Cleaned up temp %s: %s", handle.kind, handle.path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning("Failed to clean up %s", handle.path)

    @contextmanager
    def scoped(self, kind: ArtifactKind, extension: str, request_id: str) -> Iterator[TempFileHandle]:
        """Allocate a handle and release it however the block exits."""
        handle = self.allocate(kind, extension, request_id)
        try:
            yield handle
        finally:
            self.release(handle)
