"""Request handlers, one coroutine per relay operation.

Every handler receives an open NotionClient and its validated request model
and returns the operation-specific part of the success response. The
credential check happens in the HTTP layer before a handler is reached.
"""

from dataclasses import asdict, dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Type

from loguru import logger
from pydantic import BaseModel, ConfigDict

from notion_core import (
    HeuristicFormatter,
    NotionClient,
    NotionDatabase,
    NotionPage,
    SchemaFormatter,
    fetch_database_schema,
    fetch_page_schema,
)

from .errors import missing_fields


class CreateDatabaseRequest(BaseModel):
    page_id: Optional[str] = None
    title: Optional[str] = None
    properties: Optional[Dict[str, str]] = None


class CreatePageRequest(BaseModel):
    database_id: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None


class DatabaseRequest(BaseModel):
    database_id: Optional[str] = None


class PageRequest(BaseModel):
    page_id: Optional[str] = None


class UpdatePageRequest(BaseModel):
    page_id: Optional[str] = None
    properties: Optional[Dict[str, Any]] = None


class ReplacePageRequest(BaseModel):
    """page_id and optional content; every other field is a property to set."""

    model_config = ConfigDict(extra="allow")

    page_id: Optional[str] = None
    content: Any = None

    @property
    def properties(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


def _require(req: BaseModel, *fields: str) -> None:
    if any(getattr(req, f) in (None, "") for f in fields):
        raise missing_fields(*fields)


async def create_database(client: NotionClient, req: CreateDatabaseRequest) -> Dict[str, Any]:
    _require(req, "page_id", "title", "properties")
    db = await NotionDatabase.create(client, req.page_id, req.title, req.properties)
    return {"database_id": db.id, "title": db.title, "url": db.url}


async def create_page(client: NotionClient, req: CreatePageRequest) -> Dict[str, Any]:
    _require(req, "database_id", "properties")
    schema = await fetch_database_schema(client, req.database_id)
    formatted, _ = SchemaFormatter(schema).format(req.properties)
    page = await NotionPage.create(client, req.database_id, formatted)
    return {"page_id": page.id, "url": page.url}


async def get_database_properties(client: NotionClient, req: DatabaseRequest) -> Dict[str, Any]:
    _require(req, "database_id")
    db = NotionDatabase(client, req.database_id)
    return {
        "database_id": req.database_id,
        "allProperties": list(await db.schema()),
        "editableProperties": await db.editable_properties(),
    }


async def delete_page(client: NotionClient, req: PageRequest) -> Dict[str, Any]:
    _require(req, "page_id")
    archived_id = await NotionPage(client, req.page_id).archive()
    return {"message": f"Page {req.page_id} archived successfully", "page_id": archived_id}


async def delete_database(client: NotionClient, req: DatabaseRequest) -> Dict[str, Any]:
    _require(req, "database_id")
    archived_id = await NotionDatabase(client, req.database_id).archive()
    return {
        "message": f"Database {req.database_id} archived successfully",
        "database_id": archived_id,
    }


async def update_page(client: NotionClient, req: UpdatePageRequest) -> Dict[str, Any]:
    _require(req, "page_id", "properties")
    formatted, _ = HeuristicFormatter().format(req.properties)
    data = await NotionPage(client, req.page_id).update_properties(formatted)
    return {"page_id": data.get("id", req.page_id), "url": data.get("url", "")}


async def get_page_properties(client: NotionClient, req: PageRequest) -> Dict[str, Any]:
    _require(req, "page_id")
    page = NotionPage(client, req.page_id)
    return {
        "page_id": req.page_id,
        "allProperties": list(await page.schema()),
        "editableProperties": await page.editable_properties(),
    }


async def replace_page(client: NotionClient, req: ReplacePageRequest) -> Dict[str, Any]:
    """Set properties by the page's own schema, then replace its body if content is given."""
    _require(req, "page_id")
    page = NotionPage(client, req.page_id)

    schema = await fetch_page_schema(client, req.page_id)
    logger.debug(f"[replace_page] {req.page_id} schema: {schema}")
    formatted, skipped = SchemaFormatter(schema).format(req.properties)

    if formatted:
        await page.update_properties(formatted)
    else:
        logger.info(f"[replace_page] no valid properties to update for {req.page_id}")

    appended = 0
    if req.content:
        appended = await page.replace_content(req.content)

    return {
        "page_id": req.page_id,
        "updatedProperties": list(formatted),
        "appendedBlocks": appended,
        "skippedProperties": skipped,
    }


async def get_database_rows(client: NotionClient, req: DatabaseRequest) -> Dict[str, Any]:
    _require(req, "database_id")
    rows = await NotionDatabase(client, req.database_id).rows()
    return {
        "database_id": req.database_id,
        "total": len(rows),
        "rows": [asdict(r) for r in rows],
    }


async def get_page_details(client: NotionClient, req: PageRequest) -> Dict[str, Any]:
    _require(req, "page_id")
    record = await NotionPage(client, req.page_id).simplified()
    return {"page_id": req.page_id, "url": record.url, "properties": record.properties}


@dataclass(frozen=True)
class Operation:
    """A relay endpoint: its request model and the handler that serves it."""

    name: str
    model: Type[BaseModel]
    handler: Callable[[NotionClient, Any], Awaitable[Dict[str, Any]]]


OPERATIONS: Mapping[str, Operation] = MappingProxyType(
    {
        op.name: op
        for op in (
            Operation("create-database", CreateDatabaseRequest, create_database),
            Operation("create-page", CreatePageRequest, create_page),
            Operation("get-database-properties", DatabaseRequest, get_database_properties),
            Operation("delete-page", PageRequest, delete_page),
            Operation("delete-database", DatabaseRequest, delete_database),
            Operation("update-page", UpdatePageRequest, update_page),
            Operation("get-page-properties", PageRequest, get_page_properties),
            Operation("update-page1", ReplacePageRequest, replace_page),
            Operation("get-database-rows", DatabaseRequest, get_database_rows),
            Operation("get-page-details", PageRequest, get_page_details),
        )
    }
)
