"""
Numbering remapping for DOCX merging.

Abstract (``w:abstractNum``) and concrete (``w:num``) numbering definitions of
each source get the source index appended to their ids so that definitions of
different sources can live side by side in one ``numbering.xml``.
"""

import copy
import logging
from typing import List

from lxml import etree

from ..parser.package import NUMBERING_PART, DocxPackage
from ..parser.xml_utils import get_val, iter_children, qn, suffix_attribute
from .content_types import ContentTypeMerger
from .relationship_merger import RelationshipMerger
from .session import MergeSession

logger = logging.getLogger(__name__)

NUMBERING_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.numbering+xml"
NUMBERING_REL_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/numbering"

STYLE_REFERENCE_TAGS = ("w:pStyle", "w:numStyleLink", "w:styleLink")
DEFINITION_TAGS = (qn("w:abstractNum"), qn("w:num"))
NO_NUMBERING = "0"


class NumberingRemapper:
    """
    Renumbers numbering definitions per source and assembles the merged part.

    Numeric ids get the source index concatenated (``numId`` 3 of source 1
    becomes 31); style names referenced from abstract definitions get
    ``_<index>`` like the styles they point to.
    """

    def __init__(self, session: MergeSession) -> None:
        self.session = session

    def prepare(self, source: DocxPackage, source_index: int) -> None:
        """
        Renumber the numbering definitions of *source* and collect them.

        Sources without ``word/numbering.xml`` are skipped.
        """
        root = source.xml_if_exists(NUMBERING_PART)
        if root is None:
            logger.debug(f"Source {source_index} has no numbering part")
            return

        index_suffix = str(source_index)
        style_suffix = f"_{source_index}"

        for abstract in iter_children(root, "w:abstractNum"):
            suffix_attribute(abstract, "w:abstractNumId", index_suffix)
            for tag in STYLE_REFERENCE_TAGS:
                for reference in abstract.iter(qn(tag)):
                    suffix_attribute(reference, "w:val", style_suffix)

        for num in iter_children(root, "w:num"):
            suffix_attribute(num, "w:numId", index_suffix)
            for reference in num.iter(qn("w:abstractNumId")):
                suffix_attribute(reference, "w:val", index_suffix)

        for part_name in source.reference_part_names(include_secondary=source_index == 0):
            part_root = source.xml_if_exists(part_name)
            if part_root is not None and renumber_num_references(part_root, index_suffix):
                source.set_xml(part_name, part_root)

        source.set_xml(NUMBERING_PART, root)

        if self.session.numbering_root is None:
            self.session.numbering_root = root
        self.session.numbering_fragments.append(
            [copy.deepcopy(element) for element in definitions_span(root)]
        )

    def generate(
        self,
        target: DocxPackage,
        content_types: ContentTypeMerger,
        relationships: RelationshipMerger,
    ) -> None:
        """
        Write all collected definitions into the numbering part of *target*.

        Abstract definitions of every source come first, then the concrete
        ones, each group in source order. A numbering part is created when
        *target* has none.
        """
        elements = [element for fragment in self.session.numbering_fragments for element in fragment]
        if not elements:
            return

        root = target.xml_if_exists(NUMBERING_PART)
        if root is None:
            shell = self.session.numbering_root
            root = etree.Element(shell.tag, attrib=dict(shell.attrib), nsmap=shell.nsmap)
            content_types.ensure_override(f"/{NUMBERING_PART}", NUMBERING_CONTENT_TYPE)
            relationships.ensure_relationship(NUMBERING_REL_TYPE, "numbering.xml")
            logger.info("Created numbering part in merged package")
        else:
            for element in definitions_span(root):
                root.remove(element)

        abstracts = [element for element in elements if element.tag == qn("w:abstractNum")]
        nums = [element for element in elements if element.tag == qn("w:num")]
        trailing = []
        seen_tags = set()
        for element in elements:
            if element.tag in DEFINITION_TAGS or element.tag in seen_tags:
                continue
            seen_tags.add(element.tag)
            trailing.append(element)

        root.extend(copy.deepcopy(element) for element in abstracts + nums + trailing)
        target.set_xml(NUMBERING_PART, root)
        logger.debug(f"Wrote {len(abstracts)} abstract and {len(nums)} concrete numbering definitions")


def definitions_span(root: etree._Element) -> List[etree._Element]:
    """Element children of *root* from the first numbering definition to the end."""
    children = list(root.iterchildren(etree.Element))
    for position, child in enumerate(children):
        if child.tag in DEFINITION_TAGS:
            return children[position:]
    return []


def renumber_num_references(root: etree._Element, index_suffix: str) -> int:
    """
    Append *index_suffix* to every ``w:numId`` reference under *root*.

    The value ``0`` means "no numbering" and is left as is.

    Returns:
        Number of references rewritten
    """
    count = 0
    for reference in root.iter(qn("w:numId")):
        value = get_val(reference)
        if value is None or value == NO_NUMBERING:
            continue
        suffix_attribute(reference, "w:val", index_suffix)
        count += 1
    return count
