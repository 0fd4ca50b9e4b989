"""
Relationship Merger - handles OPC relationships when merging DOCX documents.

Handles:
- Merging ``word/_rels/document.xml.rels`` entries by id (first occurrence wins)
- Optional renaming of colliding relationship ids of later sources
- Registering relationships for parts created during the merge
- Writing the merged relationships and dropping ones whose target part is gone
"""

from __future__ import annotations

import copy
import logging
import posixpath
from urllib.parse import unquote
from typing import Dict, List, Set

from lxml import etree

from ..parser.package import DOCUMENT_PART, DOCUMENT_RELS_PART, DocxPackage
from ..parser.xml_utils import RELS_NS, rename_relationship_references
from .session import MergeSession, RelationshipEntry

logger = logging.getLogger(__name__)

RELATIONSHIP_TAG = f"{{{RELS_NS}}}Relationship"
DOCUMENT_BASE_DIR = "word"


def resolve_target(target: str, base_dir: str = DOCUMENT_BASE_DIR) -> str:
    """
    Resolve a relationship ``Target`` to a part name.

    Args:
        target: Target attribute value (relative to *base_dir* or absolute)
        base_dir: Folder of the source part

    Returns:
        Normalized part name without leading slash
    """
    target = unquote(target)
    if target.startswith("/"):
        return posixpath.normpath(target.lstrip("/"))
    return posixpath.normpath(posixpath.join(base_dir, target))


def is_external(node: etree._Element) -> bool:
    return node.get("TargetMode") == "External"


class RelationshipMerger:
    """
    Manages document relationships while merging DOCX packages.

    Relationships are keyed by ``Id``; the first source that declares an id
    owns it and later declarations with the same id are dropped.
    """

    def __init__(self, session: MergeSession) -> None:
        """
        Initializes relationship merger.

        Args:
            session: Merge session holding the relationship registry
        """
        self.session = session

    def merge(self, source: DocxPackage, source_index: int) -> None:
        """
        Register the relationships of *source* whose id is not taken yet.

        Args:
            source: Source package
            source_index: Position of the source in the merge

        Raises:
            MissingPartError: If the source has no document relationships part
        """
        rels_root = source.xml(DOCUMENT_RELS_PART)
        registry = self.session.relationships
        for node in rels_root.iterchildren(RELATIONSHIP_TAG):
            rel_id = node.get("Id")
            if rel_id in registry:
                logger.debug(f"Relationship {rel_id} of source {source_index} already registered, skipped")
                continue
            registry[rel_id] = RelationshipEntry(
                rel_id=rel_id,
                element=copy.deepcopy(node),
                source_index=source_index,
            )

    def rename_collisions(self, source: DocxPackage, source_index: int) -> Dict[str, str]:
        """
        Rename relationships of *source* whose id is already registered with another target.

        The renamed id is ``<id>_<source_index>``; references in the source's
        ``document.xml`` are rewritten to match.

        Returns:
            Mapping of old id to new id
        """
        rels_root = source.xml(DOCUMENT_RELS_PART)
        document_root = source.xml(DOCUMENT_PART)
        taken: Set[str] = set(self.session.relationships)
        taken.update(node.get("Id") for node in rels_root.iterchildren(RELATIONSHIP_TAG))

        renamed: Dict[str, str] = {}
        for node in rels_root.iterchildren(RELATIONSHIP_TAG):
            rel_id = node.get("Id")
            existing = self.session.relationships.get(rel_id)
            if existing is None or self._same_relationship(existing.element, node):
                continue
            new_id = f"{rel_id}_{source_index}"
            while new_id in taken:
                new_id = f"{new_id}_{source_index}"
            node.set("Id", new_id)
            taken.add(new_id)
            rename_relationship_references(document_root, rel_id, new_id)
            renamed[rel_id] = new_id

        if renamed:
            source.set_xml(DOCUMENT_RELS_PART, rels_root)
            source.set_xml(DOCUMENT_PART, document_root)
            logger.debug(f"Renamed {len(renamed)} colliding relationships of source {source_index}")
        return renamed

    def ensure_relationship(self, rel_type: str, target: str) -> str:
        """
        Return the id of a relationship of *rel_type*, registering one if needed.

        Args:
            rel_type: Relationship type URI
            target: Target used when a new relationship is registered

        Returns:
            Relationship id
        """
        for entry in self.session.relationships.values():
            if entry.element.get("Type") == rel_type:
                return entry.rel_id

        rel_id = self._generate_relationship_id()
        node = etree.Element(RELATIONSHIP_TAG, Id=rel_id, Type=rel_type, Target=target)
        self.session.relationships[rel_id] = RelationshipEntry(rel_id=rel_id, element=node, source_index=0)
        logger.debug(f"Registered relationship {rel_id} -> {target}")
        return rel_id

    def generate(self, target: DocxPackage) -> None:
        """Replace the document relationships of *target* with the merged registry."""
        rels_root = target.xml(DOCUMENT_RELS_PART)
        for child in list(rels_root):
            rels_root.remove(child)

        written = 0
        for entry in self.session.relationships.values():
            node = entry.element
            if not is_external(node):
                part_name = resolve_target(node.get("Target", ""))
                if not target.has_part(part_name):
                    logger.warning(
                        f"Dropping relationship {entry.rel_id} of source {entry.source_index}: "
                        f"target part {part_name} is not in the merged package"
                    )
                    continue
            rels_root.append(copy.deepcopy(node))
            written += 1

        target.set_xml(DOCUMENT_RELS_PART, rels_root)
        logger.debug(f"Wrote {written} relationships")

    def _generate_relationship_id(self) -> str:
        counter = len(self.session.relationships) + 1
        while f"rId{counter}" in self.session.relationships:
            counter += 1
        return f"rId{counter}"

    @staticmethod
    def _same_relationship(first: etree._Element, second: etree._Element) -> bool:
        return all(first.get(attr) == second.get(attr) for attr in ("Type", "Target", "TargetMode"))


def find_relationships_by_target(rels_root: etree._Element, part_name: str) -> List[etree._Element]:
    """Return the relationship nodes of *rels_root* resolving to *part_name*."""
    return [
        node
        for node in rels_root.iterchildren(RELATIONSHIP_TAG)
        if not is_external(node) and resolve_target(node.get("Target", "")) == part_name
    ]

