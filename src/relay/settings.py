from pydantic import BaseModel
from dotenv import load_dotenv
import os

load_dotenv()

class Settings(BaseModel):
    notion_api_base: str = os.getenv("NOTION_API_BASE", "https://api.notion.com/v1")
    notion_version: str = os.getenv("NOTION_VERSION", "2022-06-28")
    notion_timeout: float = float(os.getenv("NOTION_TIMEOUT", "30"))

settings = Settings()
