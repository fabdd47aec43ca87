# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

import platform
import sys
import tarfile
from pathlib import Path

import httpx
from loguru import logger

from clarinet_sandbox.runtimes.clarinet import PACKAGE_BIN_DIR

CLARINET_VERSION = "v2.11.0"
BINARY_ARCHIVE = "clarinet-linux-x64-glibc.tar.gz"
DOWNLOAD_URL = f"https://github.com/stx-labs/clarinet/releases/download/{CLARINET_VERSION}/{BINARY_ARCHIVE}"


def download(url: str, dest: Path, client: httpx.Client | None = None) -> None:
    """Stream ``url`` to ``dest``, following redirects.

    Raises:
        httpx.HTTPStatusError: If the final response is not 2xx.
    """
    http = client or httpx.Client(follow_redirects=True, timeout=120.0)
    try:
        with http.stream("GET", url) as response:
            response.raise_for_status()
            with open(dest, "wb") as f:
                for chunk in response.iter_bytes():
                    f.write(chunk)
    finally:
        if client is None:
            http.close()


def install(bin_dir: Path = PACKAGE_BIN_DIR, url: str = DOWNLOAD_URL, client: httpx.Client | None = None) -> Path | None:
    """Install the Clarinet binary into ``bin_dir``.

    Returns:
        Path | None: The binary path, or None when skipped on a non-Linux host.

    Raises:
        httpx.HTTPError: If the download fails.
        tarfile.TarError: If the archive cannot be extracted.
    """
    if platform.system().lower() != "linux":
        logger.info("Skipping Clarinet download: local system is not Linux.")
        return None

    binary = bin_dir / "clarinet"
    if binary.exists():
        logger.info(f"Clarinet already installed in {bin_dir}")
        return binary

    bin_dir.mkdir(parents=True, exist_ok=True)
    archive = bin_dir / BINARY_ARCHIVE
    logger.info(f"Downloading Clarinet {CLARINET_VERSION} for Linux...")
    try:
        download(url, archive, client)
        logger.info("Extracting...")
        with tarfile.open(archive, mode="r:gz") as tar:
            tar.extractall(bin_dir, filter="data")
    finally:
        archive.unlink(missing_ok=True)

    if binary.exists():
        binary.chmod(0o755)
    logger.info(f"Clarinet installed to {binary}")
    return binary


def main() -> None:
    """Entry point for ``clarinet-sandbox-install``."""
    try:
        install()
    except (httpx.HTTPError, tarfile.TarError, OSError) as e:
        logger.error(f"Failed to install Clarinet: {e}")
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
