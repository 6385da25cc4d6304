"""Translate between caller values and Notion property fragments.

Write direction: ``format_property(type, value)`` builds the fragment Notion
expects when setting a property of that type. Two strategies apply it to a
whole batch of caller properties:

* ``SchemaFormatter`` matches keys against a fetched schema and formats each
  value by its declared type.
* ``HeuristicFormatter`` never looks at a schema; it guesses the type of
  string values from the key name and passes everything else through.

Read direction: ``display_property(fragment)`` reduces a fragment (either one
returned by Notion or one built here) to a plain string.
"""

import math
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from loguru import logger

from .types import Fragment, PropertyType, RawValue, Schema, SimplifiedRecord


class UnsupportedPropertyType(ValueError):
    """Raised when no write rule exists for a property type."""

    def __init__(self, prop_type: str) -> None:
        super().__init__(f"Unsupported property type: {prop_type}")
        self.prop_type = prop_type


def to_text(value: Any) -> str:
    """Stringify a JSON value the way it reads as a literal."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(to_text(v) for v in value)
    return str(value)


def to_number(raw: RawValue) -> Optional[float]:
    """Coerce a raw value to a JSON number, or None when it has no numeric reading."""
    if raw.kind == "null" or raw.value == "":
        return None
    if raw.kind == "boolean":
        return int(raw.value)
    if raw.kind == "number":
        number = raw.value
    else:
        try:
            number = float(to_text(raw.value).strip())
        except ValueError:
            logger.warning(f"[formatter] {raw.value!r} is not a number, writing null")
            return None
    if not math.isfinite(number):
        logger.warning(f"[formatter] {raw.value!r} is not a finite number, writing null")
        return None
    if raw.kind == "number":
        return number
    return int(number) if number.is_integer() else number


def _text_items(raw: RawValue, typed: bool) -> List[Dict[str, Any]]:
    if raw.empty:
        return []
    item: Dict[str, Any] = {"text": {"content": to_text(raw.value)}}
    if typed:
        item = {"type": "text", **item}
    return [item]


def _named(raw: RawValue) -> Optional[Dict[str, str]]:
    return None if raw.empty else {"name": to_text(raw.value)}


def _scalar_text(raw: RawValue) -> Optional[str]:
    return None if raw.empty else to_text(raw.value)


def _file_ref(value: Any) -> Dict[str, Any]:
    url = to_text(value)
    name = url.rstrip("/").rsplit("/", 1)[-1] or url
    return {"name": name[:100], "type": "external", "external": {"url": url}}


_WRITERS: Dict[PropertyType, Callable[[RawValue], Any]] = {
    "title": lambda raw: _text_items(raw, typed=False),
    "rich_text": lambda raw: _text_items(raw, typed=True),
    "select": _named,
    "status": _named,
    "date": lambda raw: None if raw.empty else {"start": to_text(raw.value)},
    "number": to_number,
    "checkbox": lambda raw: bool(raw.value),
    "url": _scalar_text,
    "email": _scalar_text,
    "phone_number": _scalar_text,
    "multi_select": lambda raw: [{"name": to_text(v)} for v in raw.items()],
    "people": lambda raw: [{"object": "user", "id": to_text(v)} for v in raw.items()],
    "files": lambda raw: [_file_ref(v) for v in raw.items()],
}


def supports(prop_type: str) -> bool:
    """Whether ``format_property`` has a rule for the type."""
    return prop_type in _WRITERS


def format_property(prop_type: str, value: Any) -> Fragment:
    """Build the write fragment for one property.

    Args:
        prop_type: The property's declared Notion type
        value: The caller's value, plain JSON or an already tagged RawValue

    Returns:
        A single-key dict whose key is ``prop_type``

    Raises:
        UnsupportedPropertyType: If there is no rule for ``prop_type``
    """
    writer = _WRITERS.get(prop_type)
    if writer is None:
        raise UnsupportedPropertyType(prop_type)
    return {prop_type: writer(RawValue.of(value))}


class SchemaFormatter:
    """Format caller properties by the types declared in a fetched schema."""

    def __init__(self, schema: Schema) -> None:
        self.schema = dict(schema)
        self._folded = {}
        for prop_name in self.schema:
            self._folded.setdefault(prop_name.lower(), prop_name)

    def match(self, key: str) -> Optional[str]:
        """Resolve a caller key to a schema property name (exact, then case-insensitive)."""
        if key in self.schema:
            return key
        return self._folded.get(key.lower())

    def format(self, properties: Mapping[str, Any]) -> Tuple[Dict[str, Fragment], List[str]]:
        """Format every matched property.

        Returns:
            Tuple of (formatted properties keyed by schema name, skipped caller keys)
        """
        formatted: Dict[str, Fragment] = {}
        skipped: List[str] = []
        for key, value in properties.items():
            prop_name = self.match(key)
            if prop_name is None:
                logger.warning(f"[formatter] property {key!r} does not exist in schema, skipping")
                skipped.append(key)
                continue
            prop_type = self.schema[prop_name]
            if not supports(prop_type):
                logger.warning(
                    f"[formatter] property {prop_name!r} has unsupported type {prop_type!r}, skipping"
                )
                skipped.append(key)
                continue
            formatted[prop_name] = format_property(prop_type, value)
            logger.debug(f"[formatter] {prop_name!r} ({prop_type}) <- {value!r}")
        return formatted, skipped


class HeuristicFormatter:
    """Format caller properties by guessing types from key names.

    String values become a status fragment for a ``status`` key, a date
    fragment when the key contains ``date`` or is ``deadline``, and a title
    otherwise. Any other value is assumed to be a ready-made fragment.
    """

    @staticmethod
    def infer_type(key: str) -> PropertyType:
        lowered = key.lower()
        if lowered == "status":
            return "status"
        if "date" in lowered or lowered == "deadline":
            return "date"
        return "title"

    def format(self, properties: Mapping[str, Any]) -> Tuple[Dict[str, Fragment], List[str]]:
        formatted: Dict[str, Fragment] = {}
        for key, value in properties.items():
            raw = RawValue.of(value)
            if raw.kind == "text":
                formatted[key] = format_property(self.infer_type(key), raw)
            else:
                formatted[key] = raw.value
        return formatted, []


def fragment_type(fragment: Mapping[str, Any]) -> Optional[str]:
    """The property type of a fragment, from its ``type`` tag or its outer key."""
    ptype = fragment.get("type")
    if isinstance(ptype, str):
        return ptype
    keys = [k for k in fragment if k not in ("id", "type")]
    return keys[0] if len(keys) == 1 else None


def _segment_text(segment: Mapping[str, Any]) -> str:
    if "plain_text" in segment:
        return segment.get("plain_text") or ""
    return (segment.get("text") or {}).get("content", "")


def display_property(fragment: Mapping[str, Any]) -> str:
    """Reduce a property fragment to a plain display string."""
    ptype = fragment_type(fragment)
    if ptype is None:
        return ""
    value = fragment.get(ptype)

    if ptype in ("title", "rich_text"):
        return "".join(_segment_text(s) for s in value or [])
    if ptype in ("select", "status"):
        return (value or {}).get("name") or ""
    if ptype == "date":
        return (value or {}).get("start") or ""
    if ptype == "multi_select":
        return ", ".join(o.get("name", "") for o in value or [])
    if ptype == "people":
        return ", ".join(p.get("name") or p.get("id", "") for p in value or [])
    if ptype == "files":
        return ", ".join(f.get("name", "") for f in value or [])
    if ptype in ("number", "checkbox", "url", "email", "phone_number"):
        return to_text(value)
    return ""


def simplify_page(page: Mapping[str, Any]) -> SimplifiedRecord:
    """Flatten a page object to its id, url and display strings."""
    props = page.get("properties") or {}
    return SimplifiedRecord(
        page_id=page.get("id", ""),
        url=page.get("url", ""),
        properties={name: display_property(prop) for name, prop in props.items()},
    )
