"""Scoped temporary workspace for staged upload payloads."""

import base64
import json
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Dict, Any

from epubdate.shared.logging import get_logger

logger = get_logger(__name__)


class Workspace:
    """
    A uniquely named temporary directory owned by one run.

    Use as a context manager; the directory and everything staged in it
    is removed on exit, whether the run succeeded or not:

        with Workspace() as workspace:
            payload = workspace.stage_base64(ebook)
    """

    def __init__(self, base_dir: Optional[Path] = None, prefix: str = "epubdate_"):
        """
        Initialize workspace.

        Args:
            base_dir: Parent directory (defaults to system temp)
            prefix: Directory name prefix
        """
        self.base_dir = base_dir
        self.prefix = prefix
        self._path: Optional[Path] = None

    @property
    def path(self) -> Path:
        if self._path is None:
            raise RuntimeError("Workspace is not open")
        return self._path

    @property
    def is_open(self) -> bool:
        return self._path is not None

    def open(self) -> Path:
        """Create the temporary directory."""
        if self._path is None:
            self._path = Path(tempfile.mkdtemp(
                prefix=self.prefix,
                dir=str(self.base_dir) if self.base_dir else None
            ))
            logger.debug(f"Created workspace: {self._path}")
        return self._path

    def cleanup(self) -> None:
        """Remove the directory and all staged files."""
        if self._path is None:
            return
        workspace, self._path = self._path, None
        shutil.rmtree(workspace, ignore_errors=True)
        if workspace.exists():
            logger.error(f"Failed to clean up workspace {workspace}")
        else:
            logger.debug(f"Cleaned up workspace: {workspace}")

    def __enter__(self) -> "Workspace":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def stage_base64(self, source: Path) -> Path:
        """Write base64 of source's bytes to ``{name}.base64``."""
        target = self.path / f"{source.name}.base64"
        with open(source, 'rb') as src, open(target, 'wb') as dst:
            base64.encode(src, dst)
        return target

    def stage_json(self, name: str, document: Dict[str, Any]) -> Path:
        """Write a JSON document to ``name`` inside the workspace."""
        target = self.path / name
        with open(target, 'w', encoding='utf-8') as f:
            json.dump(document, f)
        return target

    def stage_upload_envelope(self, source: Path, fields: Dict[str, Any]) -> Path:
        """
        Stage the JSON body for a document upload.

        The source is base64 encoded into the workspace first, then wrapped
        with ``fields`` into ``{name}.json`` under the ``file`` key.

        Returns:
            Path to the JSON envelope
        """
        encoded = self.stage_base64(source)
        # base64.encode wraps lines at 76 chars; the API expects one string
        payload = encoded.read_text(encoding='ascii').replace('\n', '')
        return self.stage_json(f"{source.name}.json", {**fields, 'file': payload})
