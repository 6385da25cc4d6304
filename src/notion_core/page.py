"""Notion Page operations."""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from loguru import logger

from .client import NotionClient
from .formatter import simplify_page, to_text
from .schema import schema_of
from .types import EDITABLE_TYPES, Fragment, Schema, SimplifiedRecord


def paragraph_block(text: str) -> Dict[str, Any]:
    """A paragraph block holding a single text run."""
    return {
        "object": "block",
        "type": "paragraph",
        "paragraph": {"rich_text": [{"type": "text", "text": {"content": text}}]},
    }


def content_blocks(content: Any) -> List[Dict[str, Any]]:
    """Build paragraph blocks from a string or a list of strings."""
    if isinstance(content, (list, tuple)):
        return [paragraph_block(to_text(text)) for text in content]
    return [paragraph_block(to_text(content))]


class NotionPage:
    """A Notion page with its properties and operations."""

    BLOCK_PAGE_SIZE = 100

    def __init__(self, client: NotionClient, page_id: str) -> None:
        """Initialize a page.

        Args:
            client: The NotionClient instance to use for API calls
            page_id: The ID of the page
        """
        self.client = client
        self.id = page_id
        self._data: Optional[Dict[str, Any]] = None

    @classmethod
    async def create(
        cls, client: NotionClient, database_id: str, properties: Mapping[str, Fragment]
    ) -> "NotionPage":
        """Create a page (row) in a database from formatted properties."""
        data = await client.post(
            "pages", {"parent": {"database_id": database_id}, "properties": dict(properties)}
        )
        logger.info(f"[notion] created page {data.get('id')} in database {database_id}")
        page = cls(client, data["id"])
        page._data = data
        return page

    async def refresh(self) -> None:
        """Refresh the page data from Notion."""
        self._data = await self.client.get(f"pages/{self.id}")

    async def data(self) -> Dict[str, Any]:
        """Get the page data, fetching it if not already loaded."""
        if self._data is None:
            await self.refresh()
        return self._data or {}

    @property
    def url(self) -> str:
        return (self._data or {}).get("url", "")

    async def schema(self) -> Schema:
        return schema_of(await self.data())

    async def editable_properties(self) -> List[str]:
        """Names of properties whose type can be written."""
        return [name for name, ptype in (await self.schema()).items() if ptype in EDITABLE_TYPES]

    async def simplified(self) -> SimplifiedRecord:
        return simplify_page(await self.data())

    async def update_properties(self, properties: Mapping[str, Fragment]) -> Dict[str, Any]:
        """Apply formatted property updates in a single PATCH."""
        data = await self.client.patch(f"pages/{self.id}", {"properties": dict(properties)})
        logger.info(f"[notion] updated {len(properties)} properties for {self.id}")
        self._data = data
        return data

    async def archive(self) -> str:
        """Archive (soft-delete) the page. Returns the archived ID."""
        data = await self.client.patch(f"pages/{self.id}", {"archived": True})
        logger.info(f"[notion] archived page {self.id}")
        return data.get("id", self.id)

    async def list_children(self) -> List[Dict[str, Any]]:
        """Return the first page of child blocks."""
        data = await self.client.get(
            f"blocks/{self.id}/children", params={"page_size": self.BLOCK_PAGE_SIZE}
        )
        return data.get("results", [])

    async def delete_block(self, block_id: str) -> None:
        await self.client.delete(f"blocks/{block_id}")

    async def append_children(self, blocks: Sequence[Dict[str, Any]]) -> int:
        """Append blocks to the page. Returns how many blocks Notion created."""
        data = await self.client.patch(f"blocks/{self.id}/children", {"children": list(blocks)})
        return len(data.get("results", []))

    async def replace_content(self, content: Any) -> int:
        """Replace the page body with paragraphs built from ``content``.

        Existing blocks are deleted one at a time, and only once every delete
        has succeeded are the new blocks appended. This is not atomic: a
        failure part way leaves the page with some or all of its old blocks
        removed and nothing appended. Nothing is rolled back.

        Returns:
            Number of blocks appended
        """
        existing = await self.list_children()
        for block in existing:
            await self.delete_block(block["id"])
        logger.info(f"[notion] deleted {len(existing)} blocks from {self.id}")

        appended = await self.append_children(content_blocks(content))
        logger.info(f"[notion] appended {appended} blocks to {self.id}")
        return appended
