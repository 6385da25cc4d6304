"""Fetch property schemas ({name -> type}) for databases and pages."""

from typing import Any, Mapping

from .client import NotionClient
from .types import Schema


def schema_of(obj: Mapping[str, Any]) -> Schema:
    """Extract {property name -> type} from a database or page object."""
    return {name: prop.get("type", "") for name, prop in (obj.get("properties") or {}).items()}


async def fetch_database_schema(client: NotionClient, database_id: str) -> Schema:
    """Return the declared property types of a database."""
    return schema_of(await client.get(f"databases/{database_id}"))


async def fetch_page_schema(client: NotionClient, page_id: str) -> Schema:
    """Return the property types of a page, as reported on the page itself."""
    return schema_of(await client.get(f"pages/{page_id}"))
