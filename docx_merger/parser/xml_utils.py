"""
XML utilities for DOCX packages.

Handles namespace constants, qualified-name helpers, parsing and serialization
of package parts on top of lxml.
"""

from typing import Dict, Iterator, Optional
import logging

from lxml import etree

from ..exceptions import ParseError

logger = logging.getLogger(__name__)

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
RELS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
CT_NS = "http://schemas.openxmlformats.org/package/2006/content-types"
MC_NS = "http://schemas.openxmlformats.org/markup-compatibility/2006"
VML_OFFICE_NS = "urn:schemas-microsoft-com:office:office"

NAMESPACES: Dict[str, str] = {
    "w": W_NS,
    "r": R_NS,
    "rels": RELS_NS,
    "ct": CT_NS,
    "mc": MC_NS,
    "o": VML_OFFICE_NS,
}

# Parts are rewritten in place, so whitespace and comments are kept as-is.
_PARSER = etree.XMLParser(remove_blank_text=False, resolve_entities=False, huge_tree=True)


def qn(tag: str) -> str:
    """
    Convert a prefixed name such as ``w:val`` to Clark notation.

    Args:
        tag: Prefixed name using one of the keys of ``NAMESPACES``

    Returns:
        ``{namespace}local`` string usable with lxml
    """
    prefix, local = tag.split(":", 1)
    return f"{{{NAMESPACES[prefix]}}}{local}"


def parse_xml(data: bytes, part_name: str = "<unknown>") -> etree._Element:
    """
    Parse XML bytes into an element tree root.

    Args:
        data: Raw XML content
        part_name: Name of the part, used in error messages

    Returns:
        Root element

    Raises:
        ParseError: If the content is not well-formed XML
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    try:
        root = etree.fromstring(data, parser=_PARSER)
    except etree.XMLSyntaxError as e:
        raise ParseError(part_name, str(e)) from e
    logger.debug(f"Parsed {part_name}: {root.tag}")
    return root


def serialize_xml(root: etree._Element) -> bytes:
    """Serialize a part root with the declaration Office writes."""
    return etree.tostring(root, xml_declaration=True, encoding="UTF-8", standalone=True)


def local_name(element: etree._Element) -> str:
    """Return the tag of *element* without its namespace."""
    return etree.QName(element).localname


def iter_children(parent: etree._Element, tag: str) -> Iterator[etree._Element]:
    """Iterate direct children of *parent* with the given prefixed tag."""
    return parent.iterchildren(qn(tag))


def get_val(element: Optional[etree._Element]) -> Optional[str]:
    """Return ``w:val`` of *element*, or None if element or attribute is missing."""
    if element is None:
        return None
    return element.get(qn("w:val"))


def suffix_attribute(element: etree._Element, attribute: str, suffix: str) -> Optional[str]:
    """
    Append *suffix* to an attribute value in place.

    Args:
        element: Element holding the attribute
        attribute: Prefixed attribute name (e.g. ``w:val``)
        suffix: Text appended to the current value

    Returns:
        The new value, or None when the attribute is absent
    """
    name = qn(attribute)
    value = element.get(name)
    if value is None:
        return None
    element.set(name, value + suffix)
    return value + suffix


def relationship_reference_attributes(element: etree._Element) -> Iterator[str]:
    """
    Yield the names of attributes on *element* that hold relationship ids.

    Covers every attribute in the officeDocument relationships namespace
    (``r:id``, ``r:embed``, ``r:link``, ``r:pict``, ...) and VML ``o:relid``.
    """
    for name in element.attrib:
        if name.startswith(f"{{{R_NS}}}") or name == f"{{{VML_OFFICE_NS}}}relid":
            yield name


def rename_relationship_references(root: etree._Element, old_id: str, new_id: str) -> int:
    """
    Rewrite every relationship reference equal to *old_id* under *root*.

    Returns:
        Number of attributes rewritten
    """
    count = 0
    for element in root.iter(etree.Element):
        for name in list(relationship_reference_attributes(element)):
            if element.get(name) == old_id:
                element.set(name, new_id)
                count += 1
    return count
