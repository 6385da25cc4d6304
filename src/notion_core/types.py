"""Type definitions and constants for Notion API."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Tuple

PropertyType = Literal[
    "title",
    "rich_text",
    "number",
    "select",
    "multi_select",
    "status",
    "date",
    "checkbox",
    "url",
    "email",
    "phone_number",
    "people",
    "files",
]

# Property types a caller may write through this service
EDITABLE_TYPES: Tuple[PropertyType, ...] = (
    "title",
    "rich_text",
    "number",
    "select",
    "multi_select",
    "status",
    "date",
    "checkbox",
    "url",
    "email",
    "phone_number",
    "people",
    "files",
)

Schema = Dict[str, str]
Fragment = Dict[str, Any]

ValueKind = Literal["null", "text", "number", "boolean", "list", "object"]


@dataclass(frozen=True)
class RawValue:
    """A caller-supplied property value tagged with its JSON shape."""

    kind: ValueKind
    value: Any

    @classmethod
    def of(cls, value: Any) -> "RawValue":
        """Tag a decoded JSON value."""
        if isinstance(value, RawValue):
            return value
        if value is None:
            return cls("null", None)
        # bool first: it is a subclass of int
        if isinstance(value, bool):
            return cls("boolean", value)
        if isinstance(value, (int, float)):
            return cls("number", value)
        if isinstance(value, str):
            return cls("text", value)
        if isinstance(value, (list, tuple)):
            return cls("list", list(value))
        return cls("object", value)

    @property
    def empty(self) -> bool:
        """True for values that write as the type's empty representation."""
        return not self.value

    def items(self) -> List[Any]:
        """The value as a list of entries (single values become one entry)."""
        if self.kind == "list":
            return [v for v in self.value if v is not None]
        if self.empty:
            return []
        return [self.value]


@dataclass
class SimplifiedRecord:
    """A page flattened to plain-string property values."""

    page_id: str
    url: str
    properties: Dict[str, str] = field(default_factory=dict)
