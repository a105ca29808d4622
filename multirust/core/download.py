"""
Archive download with retry logic and checksum verification.

Only used by the dist installer: fetches a toolchain archive and its
published ``.sha256`` file over HTTP(S).
"""

import hashlib
import logging
import time
from pathlib import Path
from typing import Optional

import requests
from requests.exceptions import RequestException

from multirust.core.exceptions import ChecksumError, DownloadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


def fetch_text(url: str, timeout: int = 30) -> str:
    """
    Fetch a small text resource (e.g. a checksum file).

    Raises:
        DownloadError: If the request fails
    """
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except RequestException as e:
        raise DownloadError(f"could not download '{url}': {e}") from e
    return response.text


def parse_checksum(text: str) -> str:
    """
    Extract the hex digest from a ``sha256sum``-style line.

    Example:
        >>> parse_checksum("abc123  rust-nightly.tar.gz")
        'abc123'
    """
    fields = text.strip().split()
    if not fields:
        raise ChecksumError("checksum file is empty")
    return fields[0].lower()


def download_file(
    url: str,
    destination: Path,
    expected_sha256: Optional[str] = None,
    timeout: int = 30,
    max_retries: int = 3,
) -> Path:
    """
    Download file from URL to destination with retry logic and checksum verification.

    Args:
        url: URL to download from
        destination: Local path to save file
        expected_sha256: Expected SHA256 hash (verified during download)
        timeout: Request timeout in seconds
        max_retries: Maximum number of retry attempts

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If download fails after retries
        ChecksumError: If checksum doesn't match expected value
    """
    if not url:
        raise ValueError("URL cannot be empty")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    for attempt in range(max_retries):
        try:
            return _download(url, destination, expected_sha256, timeout)
        except RequestException as e:
            if attempt == max_retries - 1:
                raise DownloadError(
                    f"download of '{url}' failed after {max_retries} attempts: {e}"
                ) from e

            # Exponential backoff
            backoff_seconds = 2**attempt
            logger.warning(
                f"Download attempt {attempt + 1} failed: {e}. "
                f"Retrying in {backoff_seconds}s..."
            )
            time.sleep(backoff_seconds)

    raise DownloadError(f"download of '{url}' failed")


def _download(
    url: str, destination: Path, expected_sha256: Optional[str], timeout: int
) -> Path:
    """Stream one download attempt to disk, hashing as it goes."""
    logger.debug(f"Downloading from {url}")

    response = requests.get(url, stream=True, timeout=timeout, allow_redirects=True)
    response.raise_for_status()

    hasher = hashlib.sha256()
    with open(destination, "wb") as f:
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if chunk:
                f.write(chunk)
                hasher.update(chunk)

    if expected_sha256:
        actual = hasher.hexdigest()
        if actual.lower() != expected_sha256.lower():
            destination.unlink()
            raise ChecksumError(
                f"checksum mismatch for {destination.name}: "
                f"expected {expected_sha256}, got {actual}"
            )
        logger.debug("Checksum verified successfully")

    logger.debug(f"Download complete: {destination}")
    return destination


__all__ = ["download_file", "fetch_text", "parse_checksum"]
