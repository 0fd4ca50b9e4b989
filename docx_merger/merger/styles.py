"""
Style remapping for DOCX merging.

Each source's style ids get ``_<index>`` so that equally named styles of
different documents (every document has a ``Normal``) stay distinct in the
merged ``styles.xml``.
"""

import copy
import logging
from typing import Dict, List

from lxml import etree

from ..parser.package import STYLES_PART, DocxPackage
from ..parser.xml_utils import get_val, iter_children, qn, suffix_attribute
from .numbering import NO_NUMBERING
from .session import MergeSession

logger = logging.getLogger(__name__)

STYLE_LINK_TAGS = ("w:basedOn", "w:next", "w:link")

# Elements whose w:val names a style, in document, story and settings parts.
STYLE_REFERENCE_TAGS = (
    "w:pStyle",
    "w:rStyle",
    "w:tblStyle",
    "w:defaultTableStyle",
    "w:clickAndTypeStyle",
)


class StyleRemapper:
    """Suffixes style ids per source and assembles the merged styles part."""

    def __init__(self, session: MergeSession) -> None:
        self.session = session

    def prepare(self, source: DocxPackage, source_index: int) -> None:
        """
        Rename the styles of *source* and collect them.

        Args:
            source: Source package
            source_index: Position of the source in the merge

        Raises:
            MissingPartError: If the source has no styles part
        """
        root = source.xml(STYLES_PART)
        suffix = f"_{source_index}"

        mapping: Dict[str, str] = {}
        for style in iter_children(root, "w:style"):
            old_id = style.get(qn("w:styleId"))
            new_id = suffix_attribute(style, "w:styleId", suffix)
            if new_id is not None:
                mapping[old_id] = new_id
            for tag in STYLE_LINK_TAGS:
                for link in iter_children(style, tag):
                    suffix_attribute(link, "w:val", suffix)
            for reference in style.iter(qn("w:numId")):
                if get_val(reference) not in (None, NO_NUMBERING):
                    suffix_attribute(reference, "w:val", str(source_index))

        for part_name in source.reference_part_names(include_secondary=source_index == 0):
            part_root = source.xml_if_exists(part_name)
            if part_root is not None and rename_style_references(part_root, mapping):
                source.set_xml(part_name, part_root)

        source.set_xml(STYLES_PART, root)
        self.session.style_fragments.append([copy.deepcopy(element) for element in styles_span(root)])
        logger.debug(f"Renamed {len(mapping)} styles of source {source_index}")

    def generate(self, target: DocxPackage) -> None:
        """
        Replace the styles of *target* with the styles of every source.

        Raises:
            MissingPartError: If the target has no styles part
        """
        root = target.xml(STYLES_PART)
        for element in styles_span(root):
            root.remove(element)

        count = 0
        for fragment in self.session.style_fragments:
            for element in fragment:
                root.append(copy.deepcopy(element))
                count += 1
        target.set_xml(STYLES_PART, root)
        logger.debug(f"Wrote {count} style elements")


def styles_span(root: etree._Element) -> List[etree._Element]:
    """Element children of *root* from the first ``w:style`` to the end."""
    children = list(root.iterchildren(etree.Element))
    for position, child in enumerate(children):
        if child.tag == qn("w:style"):
            return children[position:]
    return []


def rename_style_references(root: etree._Element, mapping: Dict[str, str]) -> int:
    """
    Point style references under *root* at their renamed styles.

    Each value is looked up once in *mapping*, so a value that already
    carries a suffix is never suffixed again.

    Returns:
        Number of references rewritten
    """
    if not mapping:
        return 0
    count = 0
    tags = {qn(tag) for tag in STYLE_REFERENCE_TAGS}
    for element in root.iter(*tags):
        new_value = mapping.get(get_val(element))
        if new_value is not None:
            element.set(qn("w:val"), new_value)
            count += 1
    return count
