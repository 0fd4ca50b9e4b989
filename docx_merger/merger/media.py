"""
Media remapping for DOCX merging.

Every media file referenced by a source's main document gets a package-wide
unique path; its relationship is renamed and the document's references follow.
"""

import logging
import posixpath
import re
from typing import Dict, Set

from ..exceptions import DanglingMediaReferenceError
from ..parser.package import DOCUMENT_PART, DOCUMENT_RELS_PART, MEDIA_FOLDER, DocxPackage
from ..parser.xml_utils import rename_relationship_references
from .relationship_merger import RELATIONSHIP_TAG, find_relationships_by_target, is_external, resolve_target
from .session import MediaAsset, MergeSession

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"\d+")


def media_new_path(old_path: str, sequence_number: int) -> str:
    """
    Derive the unique path of a media file.

    The first run of digits of the file name is replaced by
    ``_<sequence_number>`` (``word/media/image1.png`` with 3 becomes
    ``media/image_3.png``); names without digits get the suffix before the
    extension. The ``word/`` prefix is stripped.

    The whole digit run is replaced, not only its first digit: with single
    digits ``image12.png`` at 1 and ``image1.png`` at 12 would both become
    ``image_12.png``.
    """
    folder, filename = posixpath.split(old_path)
    match = _DIGITS.search(filename)
    if match:
        filename = f"{filename[:match.start()]}_{sequence_number}{filename[match.end():]}"
    else:
        stem, ext = posixpath.splitext(filename)
        filename = f"{stem}_{sequence_number}{ext}"
    new_path = posixpath.join(folder, filename)
    if new_path.startswith("word/"):
        new_path = new_path[len("word/"):]
    return new_path


def rels_base_dir(rels_part: str) -> str:
    """Folder that targets of a ``.rels`` part are relative to."""
    folder = posixpath.dirname(rels_part)
    if posixpath.basename(folder) == "_rels":
        return posixpath.dirname(folder)
    return folder


class MediaRemapper:
    """
    Renames media files of each source to unique paths.

    ``prepare`` runs once per source during the merge; ``copy`` writes the
    renamed files into the output package.
    """

    def __init__(self, session: MergeSession) -> None:
        self.session = session
        self._foreign_targets: Dict[int, Set[str]] = {}

    def prepare(self, source: DocxPackage, source_index: int) -> None:
        """
        Rename the media of *source* and update its relationships and document.

        Args:
            source: Source package
            source_index: Position of the source in the merge

        Raises:
            DanglingMediaReferenceError: If a media file has no relationship at all
            MissingPartError: If the document or its relationships part is absent
        """
        media_files = source.list_folder(MEDIA_FOLDER)
        if not media_files:
            return

        rels_root = source.xml(DOCUMENT_RELS_PART)
        document_root = source.xml(DOCUMENT_PART)

        for old_path in media_files:
            nodes = find_relationships_by_target(rels_root, old_path)
            if not nodes:
                if old_path in self._targets_of_other_parts(source, source_index):
                    logger.debug(f"{old_path} of source {source_index} is not used by the main document, left as is")
                    continue
                raise DanglingMediaReferenceError(old_path, source.name)

            sequence_number = self.session.next_media_number()
            new_path = media_new_path(old_path, sequence_number)
            relationship_id = nodes[0].get("Id")
            for node in nodes:
                old_id = node.get("Id")
                new_id = f"{old_id}_{sequence_number}"
                node.set("Target", new_path)
                node.set("Id", new_id)
                rename_relationship_references(document_root, old_id, new_id)

            self.session.media.append(
                MediaAsset(
                    sequence_number=sequence_number,
                    source_index=source_index,
                    old_path=old_path,
                    new_path=new_path,
                    relationship_id=relationship_id,
                )
            )
            logger.debug(f"Media {old_path} of source {source_index} -> word/{new_path}")

        source.set_xml(DOCUMENT_RELS_PART, rels_root)
        source.set_xml(DOCUMENT_PART, document_root)

    def copy(self, target: DocxPackage) -> None:
        """
        Copy the bytes of every renamed media file into *target*.

        Original media files of *target* that were renamed are removed unless
        another part of *target* still points to them.
        """
        contents = [
            (asset, self.session.sources[asset.source_index].get_part(asset.old_path))
            for asset in self.session.media
        ]

        still_used = self._targets_of_other_parts(target, 0)
        for asset in self.session.media:
            if asset.source_index == 0 and asset.old_path not in still_used:
                target.remove_part(asset.old_path)

        for asset, content in contents:
            target.set_part(f"word/{asset.new_path}", content)
        logger.debug(f"Copied {len(self.session.media)} media files")

    def _targets_of_other_parts(self, source: DocxPackage, source_index: int) -> Set[str]:
        """Part names targeted by relationship parts other than the main document's."""
        if source_index in self._foreign_targets:
            return self._foreign_targets[source_index]
        targets: Set[str] = set()
        for rels_part in source.part_names():
            if not rels_part.endswith(".rels") or rels_part == DOCUMENT_RELS_PART:
                continue
            rels_root = source.xml(rels_part)
            base_dir = rels_base_dir(rels_part)
            for node in rels_root.iterchildren(RELATIONSHIP_TAG):
                if not is_external(node):
                    targets.add(resolve_target(node.get("Target", ""), base_dir))
        self._foreign_targets[source_index] = targets
        return targets
