"""
Merge session state.

One ``MergeSession`` holds every accumulator of a single merge call: the
loaded sources, the content-type and relationship registries, media
bookkeeping and the ordered style, numbering and body fragments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from lxml import etree

from ..config import MergeOptions
from ..parser.package import DocxPackage


@dataclass
class ContentTypeEntry:
    """A ``Default`` or ``Override`` declaration of ``[Content_Types].xml``."""

    content_type: str
    key: str
    element: etree._Element


@dataclass
class RelationshipEntry:
    """A ``Relationship`` of ``word/_rels/document.xml.rels``."""

    rel_id: str
    element: etree._Element
    source_index: int


@dataclass
class MediaAsset:
    """A media file renamed to a package-wide unique path."""

    sequence_number: int
    source_index: int
    old_path: str
    new_path: str
    relationship_id: str


@dataclass
class MergeSession:
    """Accumulators owned by one merge call."""

    options: MergeOptions
    sources: List[DocxPackage] = field(default_factory=list)
    content_types: Dict[Tuple[str, str], ContentTypeEntry] = field(default_factory=dict)
    relationships: Dict[str, RelationshipEntry] = field(default_factory=dict)
    media: List[MediaAsset] = field(default_factory=list)
    numbering_fragments: List[List[etree._Element]] = field(default_factory=list)
    numbering_root: Optional[etree._Element] = None
    style_fragments: List[List[etree._Element]] = field(default_factory=list)
    body_fragments: List[List[etree._Element]] = field(default_factory=list)
    document_namespaces: Dict[str, str] = field(default_factory=dict)
    ignorable_prefixes: List[str] = field(default_factory=list)
    media_sequence: int = 0

    def next_media_number(self) -> int:
        """Advance and return the package-wide media sequence number (starts at 1)."""
        self.media_sequence += 1
        return self.media_sequence

    @property
    def target(self) -> DocxPackage:
        """The first source, which becomes the merged package."""
        return self.sources[0]
