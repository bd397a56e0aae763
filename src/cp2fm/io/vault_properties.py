"""Read and write Java XML properties documents (``META-INF/vault/properties.xml``)."""

import xml.etree.ElementTree as ET
from collections.abc import Mapping
from typing import IO

PROPERTIES_PATH = "META-INF/vault/properties.xml"

_DOCTYPE = '<!DOCTYPE properties SYSTEM "http://java.sun.com/dtd/properties.dtd">'


def parse_properties(source: IO[bytes]) -> dict[str, str]:
    """
    Parse a Java XML properties document.

    Raises:
        xml.etree.ElementTree.ParseError: If the document is not well formed
        ValueError: If the root element is not ``<properties>``
    """
    root = ET.parse(source).getroot()
    if root.tag != "properties":
        raise ValueError(f"Unexpected root element <{root.tag}>, expected <properties>")

    properties: dict[str, str] = {}
    for entry in root.iter("entry"):
        key = entry.get("key")
        if key:
            properties[key] = entry.text or ""
    return properties


def serialize_properties(properties: Mapping[str, str], comment: str | None = None) -> bytes:
    """Render a mapping as a Java XML properties document."""
    root = ET.Element("properties")
    if comment:
        ET.SubElement(root, "comment").text = comment
    for key, value in properties.items():
        ET.SubElement(root, "entry", key=key).text = value

    ET.indent(root)
    body = ET.tostring(root, encoding="unicode")
    document = (
        '<?xml version="1.0" encoding="UTF-8" standalone="no"?>\n'
        f"{_DOCTYPE}\n{body}\n"
    )
    return document.encode("utf-8")
