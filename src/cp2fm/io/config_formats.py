"""
Parsers for the OSGi configuration formats found in content packages.

- ``.cfg``: Java properties
- ``.config``: Felix ConfigAdmin typed format
- ``.xml``: JCR ``sling:OsgiConfig`` nodes

Every parser raises ValueError on malformed input.
"""

import re
import struct
import xml.etree.ElementTree as ET
from typing import Any

JCR_NAMESPACE = "http://www.jcp.org/jcr/1.0"
JCR_PRIMARY_TYPE = f"{{{JCR_NAMESPACE}}}primaryType"
SLING_OSGI_CONFIG = "sling:OsgiConfig"

_PROPERTIES_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}

# --------------------------------------------------------------------------- #
#                              Java properties                                #
# --------------------------------------------------------------------------- #


def _logical_lines(text: str) -> list[str]:
    """Join backslash-continued lines, dropping blanks and comments."""
    lines: list[str] = []
    current = ""
    continuing = False

    for raw in text.splitlines():
        line = raw.lstrip()
        if not continuing and (not line or line[0] in "#!"):
            continue

        # an odd number of trailing backslashes continues the line
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            current += line[:-1]
            continuing = True
            continue

        lines.append(current + line)
        current = ""
        continuing = False

    if current:
        lines.append(current)
    return lines


def _unescape(value: str) -> str:
    result = []
    i = 0
    while i < len(value):
        char = value[i]
        if char != "\\" or i + 1 == len(value):
            result.append(char)
            i += 1
            continue

        nxt = value[i + 1]
        if nxt == "u":
            digits = value[i + 2 : i + 6]
            if len(digits) != 4 or not all(c in "0123456789abcdefABCDEF" for c in digits):
                raise ValueError(f"Malformed \\uxxxx escape in '{value}'")
            result.append(chr(int(digits, 16)))
            i += 6
        else:
            result.append(_PROPERTIES_ESCAPES.get(nxt, nxt))
            i += 2
    return "".join(result)


def _split_key_value(line: str) -> tuple[str, str]:
    i = 0
    while i < len(line) and line[i] not in "=: \t\f":
        i += 2 if line[i] == "\\" else 1

    key = line[:i]
    rest = line[i:].lstrip(" \t\f")
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip(" \t\f")
    return key, rest


def parse_java_properties(text: str) -> dict[str, str]:
    """Parse the Java ``.properties`` format into a string mapping."""
    properties: dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split_key_value(line)
        properties[_unescape(key)] = _unescape(value)
    return properties


# --------------------------------------------------------------------------- #
#                           Felix ConfigAdmin format                          #
# --------------------------------------------------------------------------- #

_FELIX_LINE = re.compile(r"^\s*([^=\s]+)\s*=\s*(.*?)\s*$", re.DOTALL)


def _felix_scalar(type_code: str, raw: str) -> Any:
    code = type_code.upper()
    if code in ("", "T"):
        return raw
    if code in ("I", "L", "S", "X"):
        return int(raw)
    if code == "F":
        # Felix stores floats as their raw int bits
        try:
            bits = int(raw)
        except ValueError:
            return float(raw)
        return struct.unpack(">f", struct.pack(">i", bits))[0]
    if code == "D":
        try:
            bits = int(raw)
        except ValueError:
            return float(raw)
        return struct.unpack(">d", struct.pack(">q", bits))[0]
    if code == "B":
        return raw.lower() == "true"
    if code == "C":
        if len(raw) != 1:
            raise ValueError(f"Character value expected, got '{raw}'")
        return raw
    raise ValueError(f"Unknown type code '{type_code}'")


def _felix_quoted(value: str, pos: int) -> tuple[str, int]:
    """Read a double-quoted string starting at ``pos``; return it and the next position."""
    if value[pos : pos + 1] != '"':
        raise ValueError(f"Expected '\"' at position {pos} in '{value}'")

    i = pos + 1
    while i < len(value):
        char = value[i]
        if char == "\\":
            i += 2
            continue
        if char == '"':
            return _unescape(value[pos + 1 : i]), i + 1
        i += 1
    raise ValueError(f"Unterminated string in '{value}'")


def parse_felix_value(value: str) -> Any:
    """Parse one Felix typed value, e.g. ``I"5"``, ``["a","b"]`` or ``B("true")``."""
    value = value.strip()
    if not value:
        raise ValueError("Empty value")

    type_code = ""
    if value[0].isalpha():
        type_code, value = value[0], value[1:].lstrip()

    if value.startswith('"'):
        raw, end = _felix_quoted(value, 0)
        if value[end:].strip():
            raise ValueError(f"Unexpected trailing content in '{value}'")
        return _felix_scalar(type_code, raw)

    if value[:1] in ("[", "("):
        closing = "]" if value[0] == "[" else ")"
        items = []
        i = 1
        while True:
            while i < len(value) and value[i] in " \t\r\n,":
                i += 1
            if i >= len(value):
                raise ValueError(f"Unterminated collection in '{value}'")
            if value[i] == closing:
                break
            raw, i = _felix_quoted(value, i)
            items.append(_felix_scalar(type_code, raw))
        if value[i + 1 :].strip():
            raise ValueError(f"Unexpected trailing content in '{value}'")
        return items

    raise ValueError(f"Malformed value '{value}'")


def parse_felix_config(text: str) -> dict[str, Any]:
    """Parse the Felix ConfigAdmin ``.config`` format."""
    properties: dict[str, Any] = {}
    for line in _logical_lines(text):
        match = _FELIX_LINE.match(line)
        if not match:
            raise ValueError(f"Malformed line '{line}'")
        key, value = match.groups()
        properties[key] = parse_felix_value(value)
    return properties


# --------------------------------------------------------------------------- #
#                            sling:OsgiConfig XML                             #
# --------------------------------------------------------------------------- #

_JCR_TYPE_PREFIX = re.compile(r"^\{(\w+)\}(.*)$", re.DOTALL)


def _split_jcr_array(body: str) -> list[str]:
    items = []
    current = []
    i = 0
    while i < len(body):
        char = body[i]
        if char == "\\" and i + 1 < len(body):
            current.append(body[i + 1])
            i += 2
            continue
        if char == ",":
            items.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1
    items.append("".join(current))
    return items if body else []


def _jcr_scalar(type_name: str, raw: str) -> Any:
    type_name = type_name.lower()
    if type_name == "long":
        return int(raw)
    if type_name in ("double", "decimal"):
        return float(raw)
    if type_name == "boolean":
        return raw.strip().lower() == "true"
    return raw


def parse_jcr_value(value: str) -> Any:
    """Parse a JCR docview attribute value, e.g. ``{Long}5`` or ``{Boolean}[true,false]``."""
    type_name = "String"
    match = _JCR_TYPE_PREFIX.match(value)
    if match:
        type_name, value = match.groups()

    if value.startswith("[") and value.endswith("]"):
        return [_jcr_scalar(type_name, item) for item in _split_jcr_array(value[1:-1])]

    if value.startswith("\\"):
        value = value[1:]
    return _jcr_scalar(type_name, value)


def is_osgi_config_xml(text: str) -> bool:
    """Tell whether an XML document is a ``sling:OsgiConfig`` node."""
    try:
        root = ET.fromstring(text)
    except ET.ParseError:
        return False
    return root.get(JCR_PRIMARY_TYPE) == SLING_OSGI_CONFIG


def parse_osgi_config_xml(text: str) -> dict[str, Any]:
    """
    Parse a ``sling:OsgiConfig`` docview node into properties.

    Namespaced attributes (``jcr:``, ``sling:``...) are not properties.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ValueError(f"Malformed XML: {e}") from e

    if root.get(JCR_PRIMARY_TYPE) != SLING_OSGI_CONFIG:
        raise ValueError(f"Not a {SLING_OSGI_CONFIG} node")

    properties: dict[str, Any] = {}
    for name, value in root.attrib.items():
        if name.startswith("{") or ":" in name:
            continue
        properties[name] = parse_jcr_value(value)
    return properties
