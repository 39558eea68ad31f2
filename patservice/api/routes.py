"""
FastAPI routes for the token management API.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from patservice.api.dispatcher import RequestRouter
from patservice.dependencies import get_request_router

router = APIRouter()


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.post("/{route_name}")
async def dispatch_token_operation(
    route_name: str,
    request: Request,
    token_router: Annotated[RequestRouter, Depends(get_request_router)],
) -> JSONResponse:
    """Forward the raw JSON body to the named token operation."""
    body = await request.body()
    result = await run_in_threadpool(token_router.dispatch, route_name, body)
    return JSONResponse(status_code=int(result.status_code), content=result.payload)


__all__ = ["router"]
