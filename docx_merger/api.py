"""
High-level API for DOCX merging.

Usage:
    >>> from docx_merger import merge_documents
    >>> merge_documents(["a.docx", "b.docx"], "merged.docx")
"""

from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union
import logging

from .config import GenerateOptions, LoadOptions, MergeOptions
from .merger.document_merger import DocxMerger
from .merger.relationship_merger import RELATIONSHIP_TAG
from .parser.package import (
    DOCUMENT_RELS_PART,
    MEDIA_FOLDER,
    NUMBERING_PART,
    STYLES_PART,
    DocxPackage,
    PackageSource,
)
from .parser.xml_utils import iter_children, qn

logger = logging.getLogger(__name__)


def merge_documents(
    sources: Iterable[PackageSource],
    output_path: Optional[Union[str, Path]] = None,
    page_break: bool = True,
    compression: str = "DEFLATE",
    compression_level: Optional[int] = 4,
    check_crc32: bool = False,
    rename_colliding_relationships: bool = False,
) -> Optional[bytes]:
    """
    Merge DOCX documents into one.

    Args:
        sources: Input documents in output order (paths, bytes or binary file objects)
        output_path: Where to write the result; nothing is written when None
        page_break: Insert a page break between consecutive documents
        compression: ``"DEFLATE"`` or ``"STORE"``
        compression_level: zlib level for ``"DEFLATE"``
        check_crc32: Verify archive member checksums on load
        rename_colliding_relationships: Rename clashing relationship ids of later documents

    Returns:
        Merged package bytes, or None if *sources* is empty

    Examples:
        >>> data = merge_documents([Path("cover.docx"), Path("body.docx")], page_break=False)
    """
    options = MergeOptions(
        page_break=page_break,
        load_options=LoadOptions(check_crc32=check_crc32),
        generate_options=GenerateOptions(compression=compression, compression_level=compression_level),
        rename_colliding_relationships=rename_colliding_relationships,
    )
    merger = DocxMerger()
    merger.merge(list(sources), options)
    output = merger.save()

    if output is not None and output_path is not None:
        output_path = Path(output_path)
        output_path.write_bytes(output)
        logger.info(f"Wrote {output_path}")
    return output


def describe_package(source: PackageSource) -> Dict[str, Any]:
    """
    Summarize the parts a merge touches.

    Args:
        source: Path, bytes or binary file object of a DOCX package

    Returns:
        Dictionary with part, style, numbering, media and relationship details
    """
    package = DocxPackage.open(source)

    styles = []
    styles_root = package.xml_if_exists(STYLES_PART)
    if styles_root is not None:
        styles = [style.get(qn("w:styleId")) for style in iter_children(styles_root, "w:style")]

    abstract_count = num_count = 0
    numbering_root = package.xml_if_exists(NUMBERING_PART)
    if numbering_root is not None:
        abstract_count = len(list(iter_children(numbering_root, "w:abstractNum")))
        num_count = len(list(iter_children(numbering_root, "w:num")))

    relationships = []
    rels_root = package.xml_if_exists(DOCUMENT_RELS_PART)
    if rels_root is not None:
        relationships = [
            {
                "id": node.get("Id"),
                "type": node.get("Type", "").rsplit("/", 1)[-1],
                "target": node.get("Target"),
            }
            for node in rels_root.iterchildren(RELATIONSHIP_TAG)
        ]

    return {
        "name": package.name,
        "parts": package.part_names(),
        "styles": styles,
        "numbering": {"abstract": abstract_count, "concrete": num_count},
        "media": package.list_folder(MEDIA_FOLDER),
        "relationships": relationships,
    }
