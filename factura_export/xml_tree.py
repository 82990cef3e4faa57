"""
Conversion of XML documents into plain attribute/element trees.

Elements become dicts keyed by local name, attributes are kept apart from
child elements under an "@_" prefix, and leaf elements collapse to their text.
"""

import re
from typing import Any, Union

from lxml import etree

from .config import ATTRIBUTE_PREFIX, TEXT_KEY

XmlNode = Union[str, dict, list]

_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")

_PARSER = etree.XMLParser(
    resolve_entities=False,
    no_network=True,
    remove_comments=True,
    remove_pis=True,
)


def _local_name(name: str) -> str:
    return etree.QName(name).localname


def _element_text(element: etree._Element) -> str:
    parts = [element.text or ""]
    parts.extend(child.tail or "" for child in element)
    return "".join(parts).strip()


def element_to_node(element: etree._Element) -> XmlNode:
    """
    Convert an lxml element into a tree node.

    An element without attributes or children becomes its trimmed text.
    Anything else becomes a dict; repeated child names map to lists.
    """
    children = [child for child in element if isinstance(child.tag, str)]
    text = _element_text(element)

    if not element.attrib and not children:
        return text

    node: dict[str, Any] = {}
    for name, value in element.attrib.items():
        node[ATTRIBUTE_PREFIX + _local_name(name)] = value

    for child in children:
        key = _local_name(child.tag)
        value = element_to_node(child)
        if key in node:
            existing = node[key]
            if isinstance(existing, list):
                existing.append(value)
            else:
                node[key] = [existing, value]
        else:
            node[key] = value

    if text:
        node[TEXT_KEY] = text

    return node


def parse_xml_tree(content: str) -> dict[str, XmlNode]:
    """
    Parse XML text into a tree rooted at the document element.

    Args:
        content: XML document text

    Returns:
        Single-entry dict mapping the root element's local name to its node

    Raises:
        etree.XMLSyntaxError: If the content is not well-formed XML
        ValueError: If the document references entities declared in a DOCTYPE
    """
    # lxml refuses str input that still carries an encoding declaration
    text = _XML_DECLARATION.sub("", content.lstrip("\ufeff"), count=1)
    root = etree.fromstring(text, _PARSER)

    # Entities are never expanded, so their text would silently go missing
    entity = next(root.iter(etree.Entity), None)
    if entity is not None:
        raise ValueError(f"Unsupported entity reference {entity.text} (DOCTYPE entities are not expanded)")

    return {_local_name(root.tag): element_to_node(root)}
