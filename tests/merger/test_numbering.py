"""
Tests for NumberingRemapper.
"""

from docx_merger.config import MergeOptions
from docx_merger.merger.content_types import ContentTypeMerger
from docx_merger.merger.numbering import (
    NUMBERING_CONTENT_TYPE,
    NUMBERING_REL_TYPE,
    NumberingRemapper,
    renumber_num_references,
)
from docx_merger.merger.relationship_merger import RelationshipMerger
from docx_merger.merger.session import MergeSession
from docx_merger.parser.package import DOCUMENT_PART, NUMBERING_PART, DocxPackage
from docx_merger.parser.xml_utils import get_val, iter_children, parse_xml, qn, W_NS


def _session(*packages):
    return MergeSession(options=MergeOptions(), sources=list(packages))


def _ids(root):
    abstract_ids = [node.get(qn("w:abstractNumId")) for node in iter_children(root, "w:abstractNum")]
    num_ids = [node.get(qn("w:numId")) for node in iter_children(root, "w:num")]
    return abstract_ids, num_ids


class TestNumberingRemapper:
    """Test cases for NumberingRemapper."""

    def test_prepare_concatenates_source_index(self, docx_builder):
        """Test that abstract and concrete ids get the index appended."""
        package = DocxPackage.open(
            docx_builder.build(
                body=docx_builder.paragraph("Item", num_id="1"),
                numbering=docx_builder.numbering(abstract_id="0", num_id="1", style="ListParagraph"),
            )
        )
        session = _session(package)

        NumberingRemapper(session).prepare(package, 1)

        root = package.xml(NUMBERING_PART)
        assert _ids(root) == (["01"], ["11"])
        num = next(iter_children(root, "w:num"))
        assert get_val(num.find(qn("w:abstractNumId"))) == "01"
        assert get_val(root.find(f".//{qn('w:pStyle')}")) == "ListParagraph_1"

    def test_prepare_renumbers_body_references(self, docx_builder):
        """Test that list paragraphs follow their renumbered definitions."""
        package = DocxPackage.open(
            docx_builder.build(
                body=docx_builder.paragraph("Item", num_id="1") + docx_builder.paragraph("Plain", num_id="0"),
                numbering=docx_builder.numbering(),
            )
        )
        session = _session(package)

        NumberingRemapper(session).prepare(package, 2)

        references = [get_val(node) for node in package.xml(DOCUMENT_PART).iter(qn("w:numId"))]
        assert references == ["12", "0"]

    def test_prepare_without_numbering(self, docx_builder):
        """Test that a source without numbering is skipped."""
        package = DocxPackage.open(docx_builder.build())
        session = _session(package)

        NumberingRemapper(session).prepare(package, 0)

        assert session.numbering_fragments == []
        assert session.numbering_root is None

    def test_generate_orders_abstract_before_concrete(self, docx_builder):
        """Test that abstract definitions of all sources precede the instances."""
        first = DocxPackage.open(docx_builder.build(numbering=docx_builder.numbering()))
        second = DocxPackage.open(docx_builder.build(numbering=docx_builder.numbering()))
        session = _session(first, second)
        remapper = NumberingRemapper(session)
        remapper.prepare(first, 0)
        remapper.prepare(second, 1)

        remapper.generate(first, ContentTypeMerger(session), RelationshipMerger(session))

        root = first.xml(NUMBERING_PART)
        tags = [child.tag for child in root]
        assert tags == [qn("w:abstractNum"), qn("w:abstractNum"), qn("w:num"), qn("w:num")]
        assert _ids(root) == (["00", "01"], ["10", "11"])

    def test_generate_keeps_one_trailing_element(self, docx_builder):
        """Test that trailing non-definition elements are not duplicated."""
        numbering = docx_builder.numbering() + '<w:numIdMacAtCleanup w:val="1"/>'
        first = DocxPackage.open(docx_builder.build(numbering=numbering))
        second = DocxPackage.open(docx_builder.build(numbering=numbering))
        session = _session(first, second)
        remapper = NumberingRemapper(session)
        remapper.prepare(first, 0)
        remapper.prepare(second, 1)

        remapper.generate(first, ContentTypeMerger(session), RelationshipMerger(session))

        root = first.xml(NUMBERING_PART)
        assert len(root.findall(qn("w:numIdMacAtCleanup"))) == 1
        assert list(root)[-1].tag == qn("w:numIdMacAtCleanup")

    def test_generate_creates_numbering_part(self, docx_builder):
        """Test that a target without numbering receives the later definitions."""
        first = DocxPackage.open(docx_builder.build())
        second = DocxPackage.open(docx_builder.build(numbering=docx_builder.numbering()))
        session = _session(first, second)
        content_types = ContentTypeMerger(session)
        relationships = RelationshipMerger(session)
        relationships.merge(first, 0)
        remapper = NumberingRemapper(session)
        remapper.prepare(first, 0)
        remapper.prepare(second, 1)

        remapper.generate(first, content_types, relationships)

        assert _ids(first.xml(NUMBERING_PART)) == (["01"], ["11"])
        assert (NUMBERING_CONTENT_TYPE, "/word/numbering.xml") in session.content_types
        types = [entry.element.get("Type") for entry in session.relationships.values()]
        assert NUMBERING_REL_TYPE in types

    def test_generate_without_fragments(self, docx_builder):
        """Test that nothing is created when no source has numbering."""
        package = DocxPackage.open(docx_builder.build())
        session = _session(package)

        NumberingRemapper(session).generate(package, ContentTypeMerger(session), RelationshipMerger(session))

        assert not package.has_part(NUMBERING_PART)

    def test_renumber_num_references_skips_zero(self):
        root = parse_xml(
            f'<w:body xmlns:w="{W_NS}"><w:numId w:val="3"/><w:numId w:val="0"/><w:numId/></w:body>'
        )

        assert renumber_num_references(root, "4") == 1
        assert [get_val(node) for node in root] == ["34", "0", None]
