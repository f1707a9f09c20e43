"""Helpers for reading the XML replies of a device."""

from __future__ import annotations

import xml.etree.ElementTree as ET

MULTI_ROUTING_ENGINE_MARKER = "multi-routing-engine-results"


def _local_name(name: str) -> str:
    return name.rsplit("}", 1)[-1]


def _as_text(data: bytes | str) -> str:
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


def parse_xml(data: bytes | str) -> ET.Element:
    """Parse an XML document and strip namespaces from tags and attributes."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise ValueError(f"invalid XML: {exc}") from exc
    for element in root.iter():
        if isinstance(element.tag, str):
            element.tag = _local_name(element.tag)
        if element.attrib:
            element.attrib = {_local_name(k): v for k, v in element.attrib.items()}
    return root


def is_multi_routing_engine(data: bytes | str) -> bool:
    """Tell whether a reply holds results of several routing engines."""
    return MULTI_ROUTING_ENGINE_MARKER in _as_text(data)


def _chardata(element: ET.Element) -> str:
    parts = [element.text or ""]
    parts.extend(child.tail or "" for child in element)
    return "".join(parts)


def find_text(element: ET.Element, path: str, default: str = "") -> str:
    """Return the character data of the first element at path, unstripped."""
    found = element.find(path)
    if found is None:
        return default
    return _chardata(found)


def find_int(element: ET.Element, path: str) -> int:
    """Return the integer at path; 0 when missing or empty."""
    text = find_text(element, path).strip()
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"invalid integer in <{path}>: {text!r}") from None


def find_float(element: ET.Element, path: str) -> float:
    """Return the number at path; 0.0 when missing or empty."""
    text = find_text(element, path).strip()
    if not text:
        return 0.0
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"invalid number in <{path}>: {text!r}") from None


def find_attr(element: ET.Element, path: str, name: str) -> str | None:
    """Return attribute name of the element at path, or None."""
    found = element.find(path) if path else element
    if found is None:
        return None
    return found.get(name)