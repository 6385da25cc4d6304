"""Notion Database operations."""

from typing import Any, Dict, List, Mapping, Optional

from loguru import logger

from .client import NotionClient
from .formatter import simplify_page
from .schema import schema_of
from .types import EDITABLE_TYPES, Schema, SimplifiedRecord


class NotionDatabase:
    """A Notion database and the operations the relay performs on it."""

    def __init__(self, client: NotionClient, database_id: str) -> None:
        """Initialize a database.

        Args:
            client: The NotionClient instance to use for API calls
            database_id: The ID of the database
        """
        self.client = client
        self.id = database_id
        self._data: Optional[Dict[str, Any]] = None

    @classmethod
    async def create(
        cls,
        client: NotionClient,
        parent_page_id: str,
        title: str,
        property_types: Mapping[str, str],
    ) -> "NotionDatabase":
        """Create a database under a page with empty-configured properties.

        Args:
            client: The NotionClient instance to use for API calls
            parent_page_id: The page the database is created in
            title: The database title
            property_types: Mapping of property name -> Notion property type
        """
        payload = {
            "parent": {"type": "page_id", "page_id": parent_page_id},
            "title": [{"type": "text", "text": {"content": title}}],
            "properties": {name: {ptype: {}} for name, ptype in property_types.items()},
        }
        data = await client.post("databases", payload)
        logger.info(f"[notion] created database {data.get('id')} under page {parent_page_id}")
        db = cls(client, data["id"])
        db._data = data
        return db

    async def refresh(self) -> None:
        """Refresh the database object from Notion."""
        self._data = await self.client.get(f"databases/{self.id}")

    async def data(self) -> Dict[str, Any]:
        """Get the database object, fetching it if not already loaded."""
        if self._data is None:
            await self.refresh()
        return self._data or {}

    @property
    def url(self) -> str:
        return (self._data or {}).get("url", "")

    @property
    def title(self) -> str:
        items = (self._data or {}).get("title") or []
        return items[0].get("plain_text", "") if items else ""

    async def schema(self) -> Schema:
        return schema_of(await self.data())

    async def editable_properties(self) -> List[str]:
        """Names of properties whose type can be written."""
        return [name for name, ptype in (await self.schema()).items() if ptype in EDITABLE_TYPES]

    async def query(self) -> List[Dict[str, Any]]:
        """Return the first page of rows in the database."""
        data = await self.client.post(f"databases/{self.id}/query", {})
        return data.get("results", [])

    async def rows(self) -> List[SimplifiedRecord]:
        """Query the database and flatten each row."""
        return [simplify_page(p) for p in await self.query()]

    async def archive(self) -> str:
        """Archive (soft-delete) the database. Returns the archived ID."""
        data = await self.client.patch(f"databases/{self.id}", {"archived": True})
        logger.info(f"[notion] archived database {self.id}")
        return data.get("id", self.id)
