"""Screenshot forwarding to LayoutDiff via its upload API."""

from __future__ import annotations

import asyncio
import logging
import os

import aiofiles  # type: ignore[import-untyped]
import httpx

from emurunner.shared.exceptions import UploadError
from emurunner.shared.models import UploadFailure, UploadReport

logger = logging.getLogger(__name__)


def list_screenshots(directory: str) -> list[str]:
    """Regular files directly inside ``directory``, sorted by name.

    Raises:
        UploadError: If the directory cannot be listed.
    """
    try:
        with os.scandir(directory) as entries:
            files = [entry.path for entry in entries if entry.is_file()]
    except OSError as exc:
        raise UploadError(f"cannot list screenshots in {directory}: {exc}") from exc
    return sorted(files)


class LayoutDiffUploader:
    """Implements the ``ScreenshotUploader`` protocol.

    Each file is posted as its own task; concurrency is bounded and one
    file failing never affects the others.
    """

    def __init__(
        self,
        base_url: str = "https://app.layoutdiff.com",
        *,
        timeout: int = 60,
        concurrency: int = 4,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._concurrency = max(1, concurrency)

    def upload_url(self, project_token: str, ref: str) -> str:
        return f"{self._base_url}/images/upload/{project_token}/{ref}"

    async def upload_directory(self, directory: str, *, project_token: str, ref: str) -> UploadReport:
        """Post every file in ``directory`` to LayoutDiff.

        Args:
            directory: Folder holding the screenshots.
            project_token: LayoutDiff project token.
            ref: Commit the screenshots belong to.

        Returns:
            Report of uploaded and failed files. Per-file failures are logged
            and collected, never raised.

        Raises:
            UploadError: If the directory itself cannot be listed.
        """
        files = list_screenshots(directory)
        logger.info("sending %d screenshot(s) from %s to LayoutDiff (commit: %s)", len(files), directory, ref)
        if not files:
            return UploadReport()

        url = self.upload_url(project_token, ref)
        semaphore = asyncio.Semaphore(self._concurrency)

        async with httpx.AsyncClient(timeout=self._timeout) as client:

            async def _bounded(path: str) -> UploadFailure | None:
                async with semaphore:
                    try:
                        await self._upload_file(client, url, path)
                    except UploadError as exc:
                        logger.error("failed to send %s: %s", path, exc)
                        return UploadFailure(path=path, error=str(exc))
                    return None

            results = await asyncio.gather(*(_bounded(path) for path in files))

        failures = tuple(r for r in results if r is not None)
        failed_paths = {f.path for f in failures}
        report = UploadReport(
            attempted=tuple(files),
            uploaded=tuple(p for p in files if p not in failed_paths),
            failures=failures,
        )
        logger.info("uploaded %d/%d screenshot(s)", len(report.uploaded), len(files))
        return report

    async def _upload_file(self, client: httpx.AsyncClient, url: str, path: str) -> None:
        logger.info("sending file: %s", os.path.basename(path))
        try:
            async with aiofiles.open(path, "rb") as f:
                content = await f.read()
        except OSError as exc:
            raise UploadError(f"cannot read {path}: {exc}") from exc

        try:
            resp = await client.post(url, files={"image": (os.path.basename(path), content)})
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise UploadError(f"LayoutDiff upload request failed: {exc}") from exc

        logger.info("URL: %s", resp.text.strip())
