"""Notion API client."""

from .client import NotionAPIError, NotionClient
from .database import NotionDatabase
from .formatter import (
    HeuristicFormatter,
    SchemaFormatter,
    UnsupportedPropertyType,
    display_property,
    format_property,
    simplify_page,
)
from .page import NotionPage
from .schema import fetch_database_schema, fetch_page_schema
from .types import EDITABLE_TYPES, RawValue, SimplifiedRecord

__all__ = [
    "EDITABLE_TYPES",
    "HeuristicFormatter",
    "NotionAPIError",
    "NotionClient",
    "NotionDatabase",
    "NotionPage",
    "RawValue",
    "SchemaFormatter",
    "SimplifiedRecord",
    "UnsupportedPropertyType",
    "display_property",
    "fetch_database_schema",
    "fetch_page_schema",
    "format_property",
    "simplify_page",
]
