"""
Parser module - DOCX package access and XML helpers.
"""

from .package import DocxPackage
from .xml_utils import NAMESPACES, parse_xml, qn, serialize_xml

__all__ = [
    "DocxPackage",
    "NAMESPACES",
    "parse_xml",
    "serialize_xml",
    "qn",
]
