"""
Body splicing for DOCX merging.

Collects the block content of each source's ``w:body`` and writes it into the
body of the merged document, in front of the first document's final section
properties.
"""

import copy
import logging
from typing import Dict, List, Optional

from lxml import etree

from ..exceptions import MissingPartError
from ..parser.package import DOCUMENT_PART, DocxPackage
from ..parser.xml_utils import W_NS, qn
from .session import MergeSession

logger = logging.getLogger(__name__)

IGNORABLE_ATTRIBUTE = qn("mc:Ignorable")


def page_break_paragraph() -> etree._Element:
    """Build ``<w:p><w:r><w:br w:type="page"/></w:r></w:p>``."""
    paragraph = etree.Element(qn("w:p"), nsmap={"w": W_NS})
    run = etree.SubElement(paragraph, qn("w:r"))
    etree.SubElement(run, qn("w:br"), {qn("w:type"): "page"})
    return paragraph


def find_body(document_root: etree._Element, part_name: str = DOCUMENT_PART) -> etree._Element:
    body = document_root.find(qn("w:body"))
    if body is None:
        raise MissingPartError(f"{part_name}#w:body", "document has no body element")
    return body


def trailing_section(body: etree._Element) -> Optional[etree._Element]:
    """Return the body-level ``w:sectPr`` closing *body*, if any."""
    children = list(body.iterchildren(etree.Element))
    if children and children[-1].tag == qn("w:sectPr"):
        return children[-1]
    return None


class BodySplicer:
    """Extracts body fragments per source and splices them into the output."""

    def __init__(self, session: MergeSession) -> None:
        self.session = session

    def extract(self, source: DocxPackage, source_index: int, is_last: bool) -> None:
        """
        Collect the body content of *source* as one fragment.

        Args:
            source: Source package, after style, numbering and media renames
            source_index: Position of the source in the merge
            is_last: Whether *source* is the last input

        Raises:
            MissingPartError: If the source has no document part or body
        """
        document_root = source.xml(DOCUMENT_PART)
        body = find_body(document_root, f"{source.name}:{DOCUMENT_PART}")
        section = trailing_section(body)

        fragment = [copy.deepcopy(child) for child in body if child is not section]
        if not is_last and self.session.options.page_break:
            fragment.append(page_break_paragraph())
        self.session.body_fragments.append(fragment)

        self._record_namespaces(document_root)
        logger.debug(f"Extracted {len(fragment)} body elements from source {source_index}")

    def generate(self, target: DocxPackage) -> None:
        """
        Replace the body content of *target* with every collected fragment.

        The final ``w:sectPr`` of *target* is kept in place.
        """
        document_root = self._declare_namespaces(target.xml(DOCUMENT_PART))
        body = find_body(document_root)
        section = trailing_section(body)

        for child in list(body):
            if child is not section:
                body.remove(child)

        count = 0
        for fragment in self.session.body_fragments:
            for element in fragment:
                if section is not None:
                    section.addprevious(copy.deepcopy(element))
                else:
                    body.append(copy.deepcopy(element))
                count += 1

        target.set_xml(DOCUMENT_PART, document_root)
        logger.debug(f"Spliced {count} body elements from {len(self.session.body_fragments)} sources")

    def _record_namespaces(self, document_root: etree._Element) -> None:
        namespaces = self.session.document_namespaces
        for prefix, uri in document_root.nsmap.items():
            if prefix is not None and prefix not in namespaces:
                namespaces[prefix] = uri

        ignorable = document_root.get(IGNORABLE_ATTRIBUTE)
        if ignorable:
            for prefix in ignorable.split():
                if prefix not in self.session.ignorable_prefixes:
                    self.session.ignorable_prefixes.append(prefix)

    def _declare_namespaces(self, document_root: etree._Element) -> etree._Element:
        """
        Return a document root declaring every recorded prefix.

        lxml cannot add declarations to an existing element, so the root is
        rebuilt with the merged map when a prefix is missing.
        """
        nsmap: Dict[Optional[str], str] = dict(document_root.nsmap)
        missing = {
            prefix: uri
            for prefix, uri in self.session.document_namespaces.items()
            if prefix not in nsmap
        }
        if missing:
            nsmap.update(missing)
            rebuilt = etree.Element(document_root.tag, nsmap=nsmap)
            for name, value in document_root.attrib.items():
                rebuilt.set(name, value)
            rebuilt.text = document_root.text
            rebuilt.extend(list(document_root))
            document_root = rebuilt
            logger.debug(f"Declared namespaces {sorted(missing)} on merged document")

        prefixes: List[str] = [
            prefix for prefix in self.session.ignorable_prefixes if prefix in nsmap
        ]
        if prefixes:
            document_root.set(IGNORABLE_ATTRIBUTE, " ".join(prefixes))
        return document_root
