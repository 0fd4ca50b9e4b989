"""
Merge components - per-concern mergers driven by ``DocxMerger``.
"""

from .body import BodySplicer
from .content_types import ContentTypeMerger
from .document_merger import DocxMerger
from .media import MediaRemapper
from .numbering import NumberingRemapper
from .relationship_merger import RelationshipMerger
from .session import ContentTypeEntry, MediaAsset, MergeSession, RelationshipEntry
from .styles import StyleRemapper

__all__ = [
    "DocxMerger",
    "MergeSession",
    "ContentTypeEntry",
    "RelationshipEntry",
    "MediaAsset",
    "ContentTypeMerger",
    "RelationshipMerger",
    "MediaRemapper",
    "NumberingRemapper",
    "StyleRemapper",
    "BodySplicer",
]
