from json import JSONDecodeError
from typing import Any, Dict, Optional

import httpx
from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from notion_core import NotionAPIError, NotionClient

from .errors import RequestError
from .handlers import OPERATIONS, Operation
from .settings import settings

app = FastAPI(title="Notion Relay")
# optional httpx transport override for outbound Notion calls
app.state.notion_transport = None


@app.get("/health")
def health() -> dict:
    return {"ok": True}


@app.exception_handler(RequestError)
async def _request_error(request: Request, exc: RequestError) -> JSONResponse:
    logger.warning(f"{request.url.path}: {exc.message}")
    return JSONResponse({"success": False, "message": exc.message}, status_code=exc.status_code)


@app.exception_handler(NotionAPIError)
async def _notion_error(request: Request, exc: NotionAPIError) -> JSONResponse:
    logger.error(f"{request.url.path}: {exc}")
    return JSONResponse({"success": False, "error": exc.body}, status_code=500)


@app.exception_handler(httpx.RequestError)
async def _transport_error(request: Request, exc: httpx.RequestError) -> JSONResponse:
    logger.exception(f"{request.url.path}: request to Notion failed")
    return JSONResponse(
        {"success": False, "error": str(exc) or type(exc).__name__}, status_code=500
    )


def notion_client(request: Request, token: str) -> NotionClient:
    return NotionClient(
        token,
        api_base=settings.notion_api_base,
        api_version=settings.notion_version,
        timeout=settings.notion_timeout,
        transport=request.app.state.notion_transport,
    )


async def _json_body(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except (JSONDecodeError, UnicodeDecodeError):
        body = None
    if not isinstance(body, dict):
        raise RequestError(400, "Request body must be a JSON object")
    return body


def _validation_message(exc: ValidationError) -> str:
    err = exc.errors()[0]
    field = ".".join(str(p) for p in err.get("loc", ())) or "body"
    return f"{field}: {err.get('msg', 'invalid value')}"


def _endpoint(op: Operation):
    async def endpoint(request: Request, notion_token: Optional[str] = Header(None)) -> dict:
        if not notion_token:
            raise RequestError(401, "Missing notion-token in headers")
        body = await _json_body(request)
        try:
            req = op.model.model_validate(body)
        except ValidationError as e:
            raise RequestError(400, _validation_message(e)) from e

        async with notion_client(request, notion_token) as client:
            result = await op.handler(client, req)
        logger.info(f"{op.name}: ok")
        return {"success": True, **result}

    endpoint.__name__ = op.name.replace("-", "_")
    return endpoint


for _op in OPERATIONS.values():
    app.add_api_route(f"/{_op.name}", _endpoint(_op), methods=["POST"], name=_op.name)
