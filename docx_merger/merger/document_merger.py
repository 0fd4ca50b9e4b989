"""
Document Merger - concatenates DOCX packages into one.

The first input becomes the output package: its settings, theme, headers,
footers and final section properties are kept, while styles, numbering,
media, relationships, content types and body content of every input are
merged into it.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..config import MergeOptions
from ..exceptions import DocxMergerError, MergeError, SaveError
from ..parser.package import DocxPackage, PackageSource
from .body import BodySplicer
from .content_types import ContentTypeMerger
from .media import MediaRemapper
from .numbering import NumberingRemapper
from .relationship_merger import RelationshipMerger
from .session import MergeSession
from .styles import StyleRemapper

logger = logging.getLogger(__name__)


class DocxMerger:
    """
    Merges DOCX packages in order.

    One instance performs one merge: call ``merge`` with every input, then
    ``save`` for the output bytes. An instance that raised is unusable.

    Examples:
        >>> merger = DocxMerger()
        >>> merger.merge([first_bytes, Path("second.docx")])
        >>> output = merger.save()
    """

    def __init__(self) -> None:
        self.session: Optional[MergeSession] = None
        self._output: Optional[bytes] = None
        self._failed = False
        self._content_types: Optional[ContentTypeMerger] = None
        self._relationships: Optional[RelationshipMerger] = None
        self._media: Optional[MediaRemapper] = None
        self._numbering: Optional[NumberingRemapper] = None
        self._styles: Optional[StyleRemapper] = None
        self._body: Optional[BodySplicer] = None

    @property
    def failed(self) -> bool:
        return self._failed

    def merge(self, sources: Iterable[PackageSource], options: Optional[MergeOptions] = None) -> None:
        """
        Load and merge *sources*.

        Args:
            sources: Inputs in output order (bytes, paths or binary file objects)
            options: Merge options; defaults to ``MergeOptions()``

        Raises:
            MergeError: If this instance failed before, or an input cannot be loaded
            MissingPartError: If a required part of an input is absent
            ParseError: If a part of an input is not well-formed XML
            DanglingMediaReferenceError: If a media file of an input is unreferenced
        """
        if self._failed:
            raise MergeError("Merger failed earlier", "discard this instance and create a new one")

        options = options or MergeOptions()
        self._output = None
        try:
            packages = [DocxPackage.open(source, options.load_options) for source in sources]
            self._start_session(options, packages)
            for index, package in enumerate(packages):
                self._merge_source(package, index, is_last=index == len(packages) - 1)
        except DocxMergerError:
            self._failed = True
            raise

        logger.info(f"Merged {len(packages)} documents")

    def save(self) -> Optional[bytes]:
        """
        Write the merged package.

        Returns:
            Output archive bytes, or None if nothing was merged

        Raises:
            SaveError: If this instance failed before
            MissingPartError: If a required part of the output is absent
        """
        if self._failed:
            raise SaveError("Merger failed earlier", "discard this instance and create a new one")
        if self._output is not None:
            return self._output
        if self.session is None or not self.session.sources:
            logger.info("Nothing to save: no documents were merged")
            return None

        session = self.session
        target = session.target
        try:
            self._numbering.generate(target, self._content_types, self._relationships)
            self._content_types.generate(target)
            self._media.copy(target)
            self._relationships.generate(target)
            self._styles.generate(target)
            self._body.generate(target)
            self._output = target.generate(session.options.generate_options)
        except DocxMergerError:
            self._failed = True
            raise

        logger.info(f"Saved merged document ({len(self._output)} bytes)")
        return self._output

    def _start_session(self, options: MergeOptions, packages: list) -> None:
        self.session = MergeSession(options=options, sources=packages)
        self._content_types = ContentTypeMerger(self.session)
        self._relationships = RelationshipMerger(self.session)
        self._media = MediaRemapper(self.session)
        self._numbering = NumberingRemapper(self.session)
        self._styles = StyleRemapper(self.session)
        self._body = BodySplicer(self.session)

    def _merge_source(self, package: DocxPackage, index: int, is_last: bool) -> None:
        logger.debug(f"Merging source {index}: {package.name}")
        self._content_types.merge(package)
        self._media.prepare(package, index)
        if self.session.options.rename_colliding_relationships and index > 0:
            self._relationships.rename_collisions(package, index)
        self._relationships.merge(package, index)
        self._numbering.prepare(package, index)
        self._styles.prepare(package, index)
        self._body.extract(package, index, is_last)
