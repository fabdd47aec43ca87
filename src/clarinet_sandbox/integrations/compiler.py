# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

from dataclasses import dataclass

import httpx
from loguru import logger

from clarinet_sandbox.exceptions import CompilerProxyError

FORWARDED_HEADERS = ("X-Compilation-Time", "X-WASM-Size")


@dataclass
class CompileResponse:
    status_code: int
    content: bytes
    headers: dict[str, str]

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class CompilerProxy:
    """Forwards compile requests to the remote compiler service."""

    def __init__(self, base_url: str, timeout: float = 300.0, client: httpx.AsyncClient | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._internal_client = client is None
        self._client = client or httpx.AsyncClient()

    async def compile(self, body: bytes, content_type: str | None) -> CompileResponse:
        """POST the raw request body to ``<base_url>/compile``.

        Upstream errors are returned as they are; only transport failures raise.

        Raises:
            CompilerProxyError: If the compiler service cannot be reached.
        """
        url = f"{self.base_url}/compile"
        logger.info(f"Forwarding compile request to {url}")
        headers = {"Content-Type": content_type} if content_type else {}
        try:
            res = await self._client.post(url, content=body, headers=headers, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.error(f"Compile proxy error: {e}")
            raise CompilerProxyError(str(e)) from e

        if res.is_success:
            logger.info(f"Compiled WASM: {len(res.content)} bytes")
        else:
            logger.error(f"Compiler returned {res.status_code}: {res.text}")

        forwarded = {name: res.headers[name] for name in FORWARDED_HEADERS if name in res.headers}
        return CompileResponse(status_code=res.status_code, content=res.content, headers=forwarded)

    async def aclose(self) -> None:
        if self._internal_client:
            await self._client.aclose()
