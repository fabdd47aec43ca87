# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

from typing import Any

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from clarinet_sandbox.api.deps import get_compiler
from clarinet_sandbox.exceptions import CompilerProxyError
from clarinet_sandbox.integrations.compiler import CompilerProxy

router = APIRouter()


@router.post("/compile")
async def compile_contract(request: Request, compiler: CompilerProxy = Depends(get_compiler)) -> Any:
    body = await request.body()
    try:
        upstream = await compiler.compile(body, request.headers.get("content-type"))
    except CompilerProxyError as e:
        return JSONResponse(status_code=500, content={"error": "Compilation proxy error", "message": str(e)})

    if not upstream.ok:
        return Response(content=upstream.content, status_code=upstream.status_code)
    return Response(content=upstream.content, media_type="application/wasm", headers=upstream.headers)
