"""
web/encoders.py -- JSON and XML responses for handlers that return data.

Both encoders pass data through fastapi.encoders.jsonable_encoder first, so
pydantic models, dataclasses, datetimes and enums serialize the same way they
do in FastAPI's own responses.

The body is rendered when the response object is built. A serialization error
is raised before any status line is sent, and the caller can still answer
with a different response.

Formats:
  JSON -- application/json; charset=utf-8, one tab per indentation level,
          trailing newline.
  XML  -- application/xml; charset=utf-8, tab indentation, no declaration.
          Mapping keys become elements, sequences become repeated <item>
          elements, None becomes an empty element. Characters XML 1.0 cannot
          carry (NUL, most C0 controls) are replaced with U+FFFD.
"""

from __future__ import annotations

import json as _json
import re
import xml.etree.ElementTree as ET
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import Response

from core.errors import EncodingError

JSON_MEDIA_TYPE = "application/json; charset=utf-8"
XML_MEDIA_TYPE = "application/xml; charset=utf-8"

# Conservative subset of the XML Name production: no colons (namespaces).
_XML_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_.\-]*$")
# Everything outside the XML 1.0 Char production.
_XML_ILLEGAL_RE = re.compile(r"[^\x09\x0A\x0D\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")


def _encodable(data: Any) -> Any:
    try:
        return jsonable_encoder(data)
    except (TypeError, ValueError) as exc:
        raise EncodingError(f"cannot encode {type(data).__name__}: {exc}") from exc


class IndentedJSONResponse(Response):
    """JSON response indented with tabs."""

    media_type = JSON_MEDIA_TYPE

    def render(self, content: Any) -> bytes:
        try:
            text = _json.dumps(_encodable(content), indent="\t", ensure_ascii=False, allow_nan=False)
        except ValueError as exc:
            raise EncodingError(str(exc)) from exc
        return (text + "\n").encode("utf-8")


class XMLResponse(Response):
    """XML response built from plain data (mappings, sequences, scalars)."""

    media_type = XML_MEDIA_TYPE

    def __init__(self, content: Any, status_code: int = 200, root: str = "response", **kwargs: Any) -> None:
        self.root = root
        super().__init__(content, status_code=status_code, **kwargs)

    def render(self, content: Any) -> bytes:
        element = _to_element(self.root, _encodable(content))
        ET.indent(element, space="\t")
        return ET.tostring(element, encoding="unicode").encode("utf-8") + b"\n"


def _scalar_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    # Characters XML cannot carry become U+FFFD.
    return _XML_ILLEGAL_RE.sub("\ufffd", str(value))


def _to_element(tag: str, value: Any) -> ET.Element:
    if not isinstance(tag, str) or not _XML_NAME_RE.match(tag):
        raise EncodingError(f"invalid XML element name: {tag!r}")
    element = ET.Element(tag)
    if isinstance(value, dict):
        for key, child in value.items():
            element.append(_to_element(key, child))
    elif isinstance(value, list):
        for child in value:
            element.append(_to_element("item", child))
    else:
        element.text = _scalar_text(value)
    return element


def json(status_code: int, data: Any) -> IndentedJSONResponse:
    """Return data encoded as tab-indented JSON with the given status."""
    return IndentedJSONResponse(data, status_code=status_code)


def xml(status_code: int, data: Any, root: str = "response") -> XMLResponse:
    """Return data encoded as tab-indented XML under a root element."""
    return XMLResponse(data, status_code=status_code, root=root)
