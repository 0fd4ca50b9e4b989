"""
Content type merging for DOCX packages.

Collects ``Default`` and ``Override`` declarations of every source's
``[Content_Types].xml`` and writes the de-duplicated set into the output.
"""

import copy
import logging

from lxml import etree

from ..parser.package import CONTENT_TYPES_PART, DocxPackage
from ..parser.xml_utils import CT_NS
from .session import ContentTypeEntry, MergeSession

logger = logging.getLogger(__name__)

EMPTY_KEY = "EMPTY"


class ContentTypeMerger:
    """
    Merges content type registries.

    A declaration is identified by its content type and its key (part name,
    else extension, else ``EMPTY``); the first occurrence wins.
    """

    def __init__(self, session: MergeSession) -> None:
        self.session = session

    def merge(self, source: DocxPackage) -> None:
        """
        Register the declarations of *source* that were not seen yet.

        Raises:
            MissingPartError: If the source has no content types part
        """
        types_root = source.xml(CONTENT_TYPES_PART)
        added = 0
        for node in types_root.iterchildren(etree.Element):
            content_type = node.get("ContentType")
            key = node.get("PartName") or node.get("Extension") or EMPTY_KEY
            if (content_type, key) in self.session.content_types:
                continue
            self.session.content_types[(content_type, key)] = ContentTypeEntry(
                content_type=content_type,
                key=key,
                element=copy.deepcopy(node),
            )
            added += 1
        logger.debug(f"Registered {added} content types from {source.name}")

    def ensure_override(self, part_name: str, content_type: str) -> None:
        """Register an ``Override`` for *part_name* unless one already exists."""
        if (content_type, part_name) in self.session.content_types:
            return
        node = etree.Element(f"{{{CT_NS}}}Override", PartName=part_name, ContentType=content_type)
        self.session.content_types[(content_type, part_name)] = ContentTypeEntry(
            content_type=content_type,
            key=part_name,
            element=node,
        )

    def generate(self, target: DocxPackage) -> None:
        """Replace the declarations of *target* with the merged registry."""
        types_root = target.xml(CONTENT_TYPES_PART)
        for child in list(types_root):
            types_root.remove(child)
        for entry in self.session.content_types.values():
            types_root.append(copy.deepcopy(entry.element))
        target.set_xml(CONTENT_TYPES_PART, types_root)
        logger.debug(f"Wrote {len(self.session.content_types)} content types")
