"""ElementTree helpers shared by the POM and metadata readers."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Optional

from errors import DocumentFormatError


def parse_document(data: bytes, kind: str) -> ET.Element:
    """Parse raw document bytes into the root element.

    The encoding declared in the XML prolog is honored. Maven namespaces are
    left in place; lookups use ``{*}`` wildcards so both namespaced and plain
    documents work.

    Raises:
        DocumentFormatError: If the bytes are empty or not well-formed XML.
    """
    if not data or not data.strip():
        raise DocumentFormatError(f"empty {kind} document")
    try:
        return ET.fromstring(data)
    except ET.ParseError as e:
        raise DocumentFormatError(f"failed to parse {kind}: {e}") from e


def child(elem: Optional[ET.Element], path: str) -> Optional[ET.Element]:
    """Find a descendant by a slash-separated path of namespace-less tags."""
    if elem is None:
        return None
    return elem.find("/".join(f"{{*}}{tag}" for tag in path.split("/")))


def children(elem: Optional[ET.Element], path: str) -> list:
    """Find all descendants matching a slash-separated tag path."""
    if elem is None:
        return []
    return elem.findall("/".join(f"{{*}}{tag}" for tag in path.split("/")))


def text(elem: Optional[ET.Element], path: str) -> str:
    """Stripped text of the element at ``path`` or an empty string."""
    node = child(elem, path)
    if node is None or node.text is None:
        return ""
    return node.text.strip()


def local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix from an element tag."""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag
