"""FastAPI relay exposing simplified Notion operations."""
