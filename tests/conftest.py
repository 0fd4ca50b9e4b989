"""
Pytest configuration for DOCX Merger
"""

import io
import logging
import sys
import zipfile
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Tuple

import pytest

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"
MC_NS = "http://schemas.openxmlformats.org/markup-compatibility/2006"

DOCUMENT_CT = "application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"
STYLES_CT = "application/vnd.openxmlformats-officedocument.wordprocessingml.styles+xml"
NUMBERING_CT = "application/vnd.openxmlformats-officedocument.wordprocessingml.numbering+xml"

MEDIA_CONTENT_TYPES = {
    "png": "image/png",
    "jpeg": "image/jpeg",
    "jpg": "image/jpeg",
    "gif": "image/gif",
    "emf": "image/x-emf",
}

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'


class DocxBuilder:
    """Builds small in-memory DOCX packages for tests."""

    def build(
        self,
        body: Optional[str] = None,
        styles: Sequence[str] = ("Normal",),
        style_elements: Optional[str] = None,
        numbering: Optional[str] = None,
        media: Optional[Dict[str, Tuple[str, bytes]]] = None,
        relationships: Iterable[Tuple[str, str, str]] = (),
        extra_parts: Optional[Dict[str, bytes]] = None,
        extra_content_types: Iterable[str] = (),
        namespaces: Optional[Dict[str, str]] = None,
        ignorable: Optional[str] = None,
        section: bool = True,
    ) -> bytes:
        """
        Build a DOCX package.

        Args:
            body: Inner XML of ``w:body`` (without the final ``w:sectPr``)
            styles: Paragraph style ids written to ``styles.xml``
            style_elements: Raw ``w:style`` elements used instead of *styles*
            numbering: Inner XML of ``w:numbering``; no numbering part when None
            media: Relationship id to (file name, content) of media files
            relationships: Extra (id, type suffix, target) document relationships
            extra_parts: Additional parts by name
            extra_content_types: Raw ``Default``/``Override`` elements
            namespaces: Extra prefix declarations on the document root
            ignorable: ``mc:Ignorable`` value of the document root
            section: Close the body with a ``w:sectPr``

        Returns:
            Archive bytes
        """
        media = media or {}
        if body is None:
            body = self.paragraph("Text")

        declarations = {"w": W_NS, "r": R_NS, "a": A_NS}
        if ignorable is not None:
            declarations["mc"] = MC_NS
        declarations.update(namespaces or {})
        ns_attrs = " ".join(f'xmlns:{prefix}="{uri}"' for prefix, uri in declarations.items())
        if ignorable is not None:
            ns_attrs += f' mc:Ignorable="{ignorable}"'
        section_xml = '<w:sectPr><w:pgSz w:w="11906" w:h="16838"/></w:sectPr>' if section else ""
        document = f"{XML_DECLARATION}<w:document {ns_attrs}><w:body>{body}{section_xml}</w:body></w:document>"

        if style_elements is None:
            style_elements = "".join(
                f'<w:style w:type="paragraph" w:styleId="{style_id}"><w:name w:val="{style_id}"/></w:style>'
                for style_id in styles
            )
        styles_xml = (
            f'{XML_DECLARATION}<w:styles xmlns:w="{W_NS}"><w:docDefaults/>{style_elements}</w:styles>'
        )

        overrides = [
            f'<Override PartName="/word/document.xml" ContentType="{DOCUMENT_CT}"/>',
            f'<Override PartName="/word/styles.xml" ContentType="{STYLES_CT}"/>',
        ]
        rels = [f'<Relationship Id="rId1" Type="{R_NS}/styles" Target="styles.xml"/>']
        if numbering is not None:
            overrides.append(f'<Override PartName="/word/numbering.xml" ContentType="{NUMBERING_CT}"/>')
            rels.append(f'<Relationship Id="rId2" Type="{R_NS}/numbering" Target="numbering.xml"/>')
        for rel_id, (filename, _) in media.items():
            rels.append(f'<Relationship Id="{rel_id}" Type="{R_NS}/image" Target="media/{filename}"/>')
        for rel_id, rel_type, target in relationships:
            mode = ' TargetMode="External"' if "://" in target else ""
            rels.append(f'<Relationship Id="{rel_id}" Type="{R_NS}/{rel_type}" Target="{target}"{mode}/>')

        extensions = sorted({filename.rsplit(".", 1)[-1] for filename, _ in media.values()})
        defaults = [
            '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>',
            '<Default Extension="xml" ContentType="application/xml"/>',
        ] + [
            f'<Default Extension="{ext}" ContentType="{MEDIA_CONTENT_TYPES.get(ext, "application/octet-stream")}"/>'
            for ext in extensions
        ]
        content_types = (
            f'{XML_DECLARATION}<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
            f'{"".join(defaults)}{"".join(overrides)}{"".join(extra_content_types)}</Types>'
        )
        package_rels = (
            f'{XML_DECLARATION}<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
            f'<Relationship Id="rId1" Type="{R_NS}/officeDocument" Target="word/document.xml"/>'
            f"</Relationships>"
        )
        document_rels = (
            f'{XML_DECLARATION}<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
            f'{"".join(rels)}</Relationships>'
        )

        parts = {
            "[Content_Types].xml": content_types,
            "_rels/.rels": package_rels,
            "word/document.xml": document,
            "word/_rels/document.xml.rels": document_rels,
            "word/styles.xml": styles_xml,
        }
        if numbering is not None:
            parts["word/numbering.xml"] = (
                f'{XML_DECLARATION}<w:numbering xmlns:w="{W_NS}">{numbering}</w:numbering>'
            )
        for filename, content in media.values():
            parts[f"word/media/{filename}"] = content
        parts.update(extra_parts or {})

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as docx_zip:
            for name, content in parts.items():
                docx_zip.writestr(name, content)
        return buffer.getvalue()

    @staticmethod
    def paragraph(text: str, style: Optional[str] = None, num_id: Optional[str] = None) -> str:
        """Build a ``w:p`` with optional style and numbering references."""
        properties = ""
        if style is not None or num_id is not None:
            properties = "<w:pPr>"
            if style is not None:
                properties += f'<w:pStyle w:val="{style}"/>'
            if num_id is not None:
                properties += f'<w:numPr><w:ilvl w:val="0"/><w:numId w:val="{num_id}"/></w:numPr>'
            properties += "</w:pPr>"
        return f"<w:p>{properties}<w:r><w:t>{text}</w:t></w:r></w:p>"

    @staticmethod
    def image(rel_id: str) -> str:
        """Build a paragraph whose drawing embeds the image behind *rel_id*."""
        return f'<w:p><w:r><w:drawing><a:blip r:embed="{rel_id}"/></w:drawing></w:r></w:p>'

    @staticmethod
    def numbering(abstract_id: str = "0", num_id: str = "1", style: Optional[str] = None) -> str:
        """Build one abstract definition and one instance pointing at it."""
        style_link = f'<w:pStyle w:val="{style}"/>' if style else ""
        return (
            f'<w:abstractNum w:abstractNumId="{abstract_id}">'
            f'<w:lvl w:ilvl="0"><w:start w:val="1"/><w:numFmt w:val="decimal"/>{style_link}</w:lvl>'
            f"</w:abstractNum>"
            f'<w:num w:numId="{num_id}"><w:abstractNumId w:val="{abstract_id}"/></w:num>'
        )


@pytest.fixture(autouse=True)
def configure_logging():
    """Configure logging for tests to avoid file handler issues."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(name)s - %(levelname)s - %(message)s"))

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    root_logger.handlers.clear()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    import tempfile
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def docx_builder():
    """Builder for in-memory DOCX packages."""
    return DocxBuilder()


@pytest.fixture
def sample_docx(docx_builder):
    """A package with one style, one list and one image."""
    return docx_builder.build(
        body=docx_builder.paragraph("Heading", style="Heading1")
        + docx_builder.paragraph("Item", num_id="1")
        + docx_builder.image("rId5"),
        styles=("Normal", "Heading1"),
        numbering=docx_builder.numbering(),
        media={"rId5": ("image1.png", b"PNG-ONE")},
    )


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    logging.raiseExceptions = False
