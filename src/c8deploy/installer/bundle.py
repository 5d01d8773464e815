"""Camunda docker-compose bundle download and extraction."""

import logging
import zipfile
from pathlib import Path

import httpx

from ..errors import DownloadError

logger = logging.getLogger("c8deploy.bundle")


def download_archive(url: str, dest: Path, timeout: float = 300.0) -> Path:
    """Stream ``url`` into ``dest``, following release redirects."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    partial = dest.with_name(dest.name + ".part")

    logger.info("Downloading from %s", url)
    try:
        with httpx.stream("GET", url, follow_redirects=True, timeout=timeout) as response:
            if response.status_code >= 400:
                raise DownloadError(f"Download failed with HTTP {response.status_code}: {url}")
            with open(partial, "wb") as f:
                for chunk in response.iter_bytes():
                    f.write(chunk)
    except httpx.HTTPError as e:
        partial.unlink(missing_ok=True)
        raise DownloadError(f"Failed to download Camunda bundle: {e}")
    except DownloadError:
        partial.unlink(missing_ok=True)
        raise

    partial.replace(dest)
    return dest


def extract_archive(archive: Path, target: Path) -> None:
    """Extract ``archive`` into ``target``, overwriting existing files."""
    logger.info("Extracting Camunda compose...")
    try:
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(target)
    except zipfile.BadZipFile as e:
        raise DownloadError(f"Extraction failed: {archive}: {e}")


def fetch_bundle(url: str, archive: Path, target: Path, timeout: float = 300.0) -> None:
    """Download the bundle unless a valid archive is already present, then extract it."""
    target.mkdir(parents=True, exist_ok=True)

    if archive.exists() and zipfile.is_zipfile(archive):
        logger.info("Reusing existing archive %s", archive)
    else:
        download_archive(url, archive, timeout=timeout)

    extract_archive(archive, target)
