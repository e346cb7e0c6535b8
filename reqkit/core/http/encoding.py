"""
Request body encoders.

encode_body() turns a Python value into the bytes sent on the wire and the
matching Content-Type. It runs once per logical call; retries replay the
returned bytes.
"""

import json
import re
import xml.etree.ElementTree as ET
from enum import Enum
from typing import Any, Mapping, Tuple

from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from reqkit.core.http.exceptions import BodyEncodingError


class BodyType(str, Enum):
    JSON = "json"
    XML = "xml"
    PLAIN = "plain"

    @classmethod
    def parse(cls, value: Any) -> "BodyType":
        """Resolve a tag to a BodyType, falling back to JSON for unknown tags."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.JSON


# NCName: no colons, no spaces, not starting with a digit, dot or dash
_XML_NAME = re.compile(r"[^\W\d][\w.\-]*")

CONTENT_TYPES = {
    BodyType.JSON: "application/json",
    BodyType.XML: "application/xml",
    BodyType.PLAIN: "text/plain",
}


def encode_body(body_type: BodyType, value: Any) -> Tuple[bytes, str]:
    """
    Encode `value` according to `body_type`.

    Args:
        body_type: Target format; unknown tags are treated as JSON
        value: Body value (not None)

    Returns:
        Tuple of (payload bytes, content type)

    Raises:
        BodyEncodingError: If the value cannot be encoded
    """
    body_type = BodyType.parse(body_type)

    if body_type is BodyType.XML:
        return _encode_xml(value), CONTENT_TYPES[BodyType.XML]

    if body_type is BodyType.PLAIN:
        return _encode_plain(value), CONTENT_TYPES[BodyType.PLAIN]

    return _encode_json(value), CONTENT_TYPES[BodyType.JSON]


def _encode_json(value: Any) -> bytes:
    try:
        # models, dataclasses, datetimes, UUIDs and Decimals become plain JSON types
        data = to_jsonable_python(value, bytes_mode="base64")
        return json.dumps(
            data, separators=(",", ":"), ensure_ascii=False, allow_nan=False
        ).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise BodyEncodingError(f"json marshal: {str(e)}", original_error=e) from e


def _encode_plain(value: Any) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    raise BodyEncodingError(
        f"plain body expects str or bytes, got {type(value).__name__}"
    )


def _encode_xml(value: Any) -> bytes:
    try:
        if isinstance(value, ET.Element):
            root = value
        elif isinstance(value, BaseModel):
            root = _to_element(type(value).__name__, value.model_dump(mode="json"))
        elif isinstance(value, Mapping) and len(value) == 1:
            tag, content = next(iter(value.items()))
            root = _to_element(str(tag), content)
        elif isinstance(value, Mapping):
            root = _to_element("root", value)
        elif isinstance(value, (list, tuple)):
            root = ET.Element("root")
            for item in value:
                root.append(_to_element(_type_tag(item), item))
        else:
            root = _to_element(_type_tag(value), value)
        return ET.tostring(root, encoding="utf-8", xml_declaration=False)
    except (TypeError, ValueError) as e:
        raise BodyEncodingError(f"xml marshal: {str(e)}", original_error=e) from e


def _type_tag(value: Any) -> str:
    if isinstance(value, BaseModel):
        return type(value).__name__
    return type(value).__name__.lower()


def _to_element(tag: str, value: Any) -> ET.Element:
    if not isinstance(tag, str) or not _XML_NAME.fullmatch(tag):
        raise ValueError(f"invalid element name {tag!r}")

    element = ET.Element(tag)

    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")

    if isinstance(value, Mapping):
        for key, child in value.items():
            if isinstance(child, (list, tuple)):
                # repeated element per item, like <tags>a</tags><tags>b</tags>
                for item in child:
                    element.append(_to_element(str(key), item))
            else:
                element.append(_to_element(str(key), child))
    elif isinstance(value, (list, tuple)):
        for item in value:
            element.append(_to_element(_type_tag(item), item))
    elif value is None:
        pass
    elif isinstance(value, bool):
        element.text = "true" if value else "false"
    elif isinstance(value, (bytes, bytearray)):
        element.text = bytes(value).decode("utf-8")
    elif isinstance(value, (str, int, float)):
        element.text = str(value)
    else:
        # dates, UUIDs, Decimals, dataclasses and the like
        return _to_element(tag, to_jsonable_python(value))

    return element
