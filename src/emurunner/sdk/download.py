"""Download and unpack vendor zip archives into the SDK root."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
import zipfile
from functools import partial
from pathlib import Path

import aiofiles  # type: ignore[import-untyped]
import httpx

from emurunner.shared.exceptions import InstallError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1 << 20


async def download_file(url: str, dest: str, *, timeout: int = 600) -> None:
    """Stream ``url`` into ``dest``.

    Raises:
        InstallError: On any HTTP or transport failure.
    """
    logger.info("downloading %s", url)
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            async with client.stream("GET", url) as resp:
                resp.raise_for_status()
                async with aiofiles.open(dest, "wb") as fh:
                    async for chunk in resp.aiter_bytes(_CHUNK_SIZE):
                        await fh.write(chunk)
    except httpx.HTTPError as exc:
        raise InstallError(f"failed to download {url}: {exc}") from exc
    logger.info("downloaded %s (%.1f MB)", url, os.path.getsize(dest) / 1_048_576)


def extract_zip(archive: str, dest_dir: str) -> None:
    """Unpack ``archive`` into ``dest_dir`` keeping unix permission bits.

    ``zipfile`` drops the mode stored in ``external_attr``; sdkmanager and
    the emulator binary are unusable without their executable bit.
    """
    Path(dest_dir).mkdir(parents=True, exist_ok=True)
    try:
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                extracted = zf.extract(info, dest_dir)
                mode = (info.external_attr >> 16) & 0o777
                if mode and not info.is_dir():
                    os.chmod(extracted, mode)
    except zipfile.BadZipFile as exc:
        raise InstallError(f"corrupt archive {archive}: {exc}") from exc


async def download_and_extract(url: str, dest_dir: str, *, timeout: int = 600) -> None:
    """Fetch a zip archive and unpack it into ``dest_dir``."""
    fd, tmp_path = tempfile.mkstemp(suffix=".zip")
    os.close(fd)
    try:
        await download_file(url, tmp_path, timeout=timeout)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, partial(extract_zip, tmp_path, dest_dir))
        logger.info("extracted %s into %s", os.path.basename(url), dest_dir)
    finally:
        os.unlink(tmp_path)
