# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

import io
import tarfile
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest

from clarinet_sandbox import installer
from clarinet_sandbox.installer import BINARY_ARCHIVE, DOWNLOAD_URL, install


def archive_bytes() -> bytes:
    buf = io.BytesIO()
    payload = b"#!/bin/sh\necho clarinet\n"
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        info = tarfile.TarInfo("clarinet")
        info.size = len(payload)
        info.mode = 0o644
        tar.addfile(info, io.BytesIO(payload))
    return buf.getvalue()


def mock_client(handler: httpx.MockTransport) -> httpx.Client:
    return httpx.Client(transport=handler, follow_redirects=True)


@pytest.fixture(autouse=True)
def linux() -> Iterator[MagicMock]:
    with patch("clarinet_sandbox.installer.platform.system", return_value="Linux") as system:
        yield system


def test_download_url() -> None:
    assert DOWNLOAD_URL == "https://github.com/stx-labs/clarinet/releases/download/v2.11.0/clarinet-linux-x64-glibc.tar.gz"


def test_install_extracts_binary(tmp_path: Path) -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        if request.url.host == "github.com":
            return httpx.Response(302, headers={"Location": "https://objects.example/clarinet.tar.gz"})
        return httpx.Response(200, content=archive_bytes())

    binary = install(tmp_path / "bin", client=mock_client(httpx.MockTransport(handler)))

    assert binary == tmp_path / "bin" / "clarinet"
    assert binary.read_bytes().startswith(b"#!/bin/sh")
    assert binary.stat().st_mode & 0o777 == 0o755
    assert not (tmp_path / "bin" / BINARY_ARCHIVE).exists()
    assert seen == [DOWNLOAD_URL, "https://objects.example/clarinet.tar.gz"]


def test_install_skips_existing(tmp_path: Path) -> None:
    (tmp_path / "clarinet").write_text("")

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("should not download")

    assert install(tmp_path, client=mock_client(httpx.MockTransport(handler))) == tmp_path / "clarinet"


def test_install_skips_non_linux(tmp_path: Path, linux: MagicMock) -> None:
    with patch("clarinet_sandbox.installer.platform.system", return_value="Darwin"):
        assert install(tmp_path / "bin") is None
    assert not (tmp_path / "bin").exists()


def test_failed_download_removes_archive(tmp_path: Path) -> None:
    client = mock_client(httpx.MockTransport(lambda request: httpx.Response(404)))

    with pytest.raises(httpx.HTTPStatusError):
        install(tmp_path, client=client)

    assert list(tmp_path.iterdir()) == []


def test_corrupt_archive_is_removed(tmp_path: Path) -> None:
    client = mock_client(httpx.MockTransport(lambda request: httpx.Response(200, content=b"not a tarball")))

    with pytest.raises(tarfile.TarError):
        install(tmp_path, client=client)

    assert list(tmp_path.iterdir()) == []


def test_main_exits_on_failure() -> None:
    with patch.object(installer, "install", side_effect=httpx.ConnectError("offline")):
        with pytest.raises(SystemExit) as exc_info:
            installer.main()
    assert exc_info.value.code == 1
