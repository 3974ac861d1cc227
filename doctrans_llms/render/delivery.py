"""
Handing export artifacts to the host.

FileDelivery saves artifacts into a directory. Print artifacts are saved as an
HTML page and opened in the system browser, whose print dialog produces the
PDF; the page triggers the dialog itself once loaded.

The optional save milestones (SAVE_STEPS) only pace the progress display
before the real write happens.
"""

from __future__ import annotations

import logging
import time
import webbrowser
from pathlib import Path
from typing import Callable, Optional

from doctrans_llms.config import SAVE_STEPS
from doctrans_llms.errors import ExportError
from doctrans_llms.models import Artifact, ExportKind

logger = logging.getLogger(__name__)


class FileDelivery:
    """Save artifacts to disk.

    Args:
        directory: Target directory (created if missing)
        open_browser: Open print pages in the browser
        opener: Function opening a URL; returns False if it could not
    """

    def __init__(
        self,
        directory: Path | str,
        open_browser: bool = True,
        opener: Callable[[str], bool] = webbrowser.open,
    ):
        self.directory = Path(directory)
        self.open_browser = open_browser
        self.opener = opener

    def target_path(self, artifact: Artifact) -> Path:
        path = self.directory / artifact.filename
        if artifact.kind is ExportKind.PRINT:
            return path.with_suffix(".html")
        return path

    def deliver(
        self,
        artifact: Artifact,
        on_progress: Optional[Callable[[int], None]] = None,
        staged: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ) -> Path:
        """Save an artifact, optionally pacing the progress milestones.

        Returns:
            Path of the written file

        Raises:
            ExportError: The file could not be written or the print page
                could not be opened; the artifact itself is unaffected
        """
        for percent, delay in SAVE_STEPS[:-1]:
            if staged:
                sleep(delay)
            if on_progress:
                on_progress(percent)

        final_percent, final_delay = SAVE_STEPS[-1]
        if staged:
            sleep(final_delay)

        path = self._write(artifact)
        if artifact.kind is ExportKind.PRINT and self.open_browser:
            self._open_for_print(path)

        if on_progress:
            on_progress(final_percent)
        return path

    def _write(self, artifact: Artifact) -> Path:
        path = self.target_path(artifact)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_bytes(artifact.payload)
        except OSError as e:
            logger.warning("Saving %s failed: %s", path, e)
            raise ExportError(f"Failed to save file: {path}") from e
        logger.info("Saved %s (%s)", path, artifact.mime_type)
        return path

    def _open_for_print(self, path: Path) -> None:
        url = path.resolve().as_uri()
        try:
            opened = self.opener(url)
        except webbrowser.Error as e:
            raise ExportError(f"Could not open the print page: {e}") from e
        if not opened:
            raise ExportError(
                f"Could not open a browser to print {path}. Open it manually to save as PDF."
            )
