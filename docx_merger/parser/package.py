"""
Package access for DOCX files.

Handles opening DOCX archives from bytes, paths or file objects, typed access
to their parts, cached XML trees, and writing the package back to bytes.
"""

import io
import re
import zipfile
import zlib
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Set, Union
import logging

from lxml import etree

from ..config import GenerateOptions, LoadOptions
from ..exceptions import MissingPartError, PackageLoadError
from .xml_utils import parse_xml, serialize_xml

logger = logging.getLogger(__name__)

CONTENT_TYPES_PART = "[Content_Types].xml"
DOCUMENT_PART = "word/document.xml"
DOCUMENT_RELS_PART = "word/_rels/document.xml.rels"
STYLES_PART = "word/styles.xml"
NUMBERING_PART = "word/numbering.xml"
MEDIA_FOLDER = "word/media/"

SECONDARY_PART_PATTERN = re.compile(
    r"^word/(header\d*|footer\d*|footnotes|endnotes|comments|settings)\.xml$"
)

PackageSource = Union[bytes, bytearray, memoryview, str, Path, BinaryIO]


class DocxPackage:
    """
    In-memory DOCX package.

    Holds raw part bytes in archive order plus a cache of parsed XML roots.
    Parts changed through ``set_xml`` are serialized again on ``generate``.
    """

    def __init__(self, parts: Dict[str, bytes], name: str = "<memory>"):
        """
        Initialize package.

        Args:
            parts: Mapping of part name to raw bytes, in archive order
            name: Label used in log and error messages
        """
        self.name = name
        self._parts: Dict[str, bytes] = dict(parts)
        self._xml_cache: Dict[str, etree._Element] = {}
        self._dirty: Set[str] = set()

    @classmethod
    def open(cls, source: PackageSource, load_options: Optional[LoadOptions] = None) -> "DocxPackage":
        """
        Open a DOCX package.

        Args:
            source: Archive bytes, a filesystem path, or a binary file object
            load_options: Archive load settings

        Returns:
            Loaded package

        Raises:
            PackageLoadError: If the input cannot be read as a zip archive
        """
        load_options = load_options or LoadOptions()
        name = "<memory>"
        try:
            if isinstance(source, (str, Path)):
                name = str(source)
                stream: BinaryIO = io.BytesIO(Path(source).read_bytes())
            elif isinstance(source, (bytes, bytearray, memoryview)):
                stream = io.BytesIO(bytes(source))
            elif hasattr(source, "read"):
                name = getattr(source, "name", name)
                stream = io.BytesIO(source.read())
            else:
                raise PackageLoadError("Unsupported package source", type(source).__name__)

            with zipfile.ZipFile(stream, "r") as docx_zip:
                if load_options.check_crc32:
                    bad_member = docx_zip.testzip()
                    if bad_member is not None:
                        raise PackageLoadError(f"CRC check failed for {name}", bad_member)
                parts = {
                    info.filename: docx_zip.read(info.filename)
                    for info in docx_zip.infolist()
                    if not info.is_dir()
                }
        except (
            zipfile.BadZipFile,
            zipfile.LargeZipFile,
            zlib.error,
            EOFError,
            OSError,
            RuntimeError,
            NotImplementedError,
        ) as e:
            raise PackageLoadError(f"Failed to open DOCX package {name}", str(e)) from e

        logger.debug(f"Loaded {len(parts)} parts from {name}")
        return cls(parts, name=name)

    # ------------------------------------------------------------------
    # Raw parts

    def part_names(self) -> List[str]:
        """Return all part names in archive order."""
        return list(self._parts)

    def has_part(self, name: str) -> bool:
        return name in self._parts

    def get_part(self, name: str) -> Optional[bytes]:
        """
        Get raw content of a part.

        Args:
            name: Part name inside the archive

        Returns:
            Part bytes (serialized from the cached tree if it was changed), or None
        """
        if name in self._dirty:
            return serialize_xml(self._xml_cache[name])
        return self._parts.get(name)

    def get_text(self, name: str) -> Optional[str]:
        """Get content of a part decoded as UTF-8."""
        data = self.get_part(name)
        if data is None:
            return None
        return data.decode("utf-8")

    def set_part(self, name: str, content: Union[bytes, str]) -> None:
        """
        Replace or add a part.

        Any cached XML tree for the part is discarded.
        """
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._parts[name] = content
        self._xml_cache.pop(name, None)
        self._dirty.discard(name)

    def remove_part(self, name: str) -> None:
        self._parts.pop(name, None)
        self._xml_cache.pop(name, None)
        self._dirty.discard(name)

    def list_folder(self, prefix: str) -> List[str]:
        """
        List part names under a folder.

        Args:
            prefix: Folder prefix such as ``word/media/``

        Returns:
            Part names in archive order
        """
        return [name for name in self._parts if name.startswith(prefix) and len(name) > len(prefix)]

    def reference_part_names(self, include_secondary: bool = False) -> List[str]:
        """
        Names of parts whose content refers to style and numbering ids.

        Args:
            include_secondary: Also list headers, footers, notes, comments and settings

        Returns:
            ``word/document.xml`` followed by the secondary parts present
        """
        names = [DOCUMENT_PART]
        if include_secondary:
            names.extend(name for name in self._parts if SECONDARY_PART_PATTERN.match(name))
        return names

    # ------------------------------------------------------------------
    # XML parts

    def xml(self, name: str) -> etree._Element:
        """
        Get the parsed root of a required XML part.

        Raises:
            MissingPartError: If the part is absent
            ParseError: If the part is not well-formed
        """
        root = self.xml_if_exists(name)
        if root is None:
            raise MissingPartError(name, self.name)
        return root

    def xml_if_exists(self, name: str) -> Optional[etree._Element]:
        """Get the parsed root of an optional XML part, or None if absent."""
        if name in self._xml_cache:
            return self._xml_cache[name]
        data = self._parts.get(name)
        if data is None:
            return None
        root = parse_xml(data, name)
        self._xml_cache[name] = root
        return root

    def set_xml(self, name: str, root: etree._Element) -> None:
        """
        Store an XML root for a part and mark it for serialization.

        Args:
            name: Part name (added to the package if new)
            root: Root element of the part
        """
        if name not in self._parts:
            self._parts[name] = b""
        self._xml_cache[name] = root
        self._dirty.add(name)

    # ------------------------------------------------------------------
    # Output

    def generate(self, generate_options: Optional[GenerateOptions] = None) -> bytes:
        """
        Write the package to zip bytes.

        Args:
            generate_options: Compression settings

        Returns:
            Archive bytes
        """
        generate_options = generate_options or GenerateOptions()
        for name in sorted(self._dirty):
            self._parts[name] = serialize_xml(self._xml_cache[name])
        self._dirty.clear()

        buffer = io.BytesIO()
        with zipfile.ZipFile(
            buffer,
            "w",
            compression=generate_options.zip_compression,
            compresslevel=generate_options.compression_level,
        ) as docx_zip:
            for name, content in self._parts.items():
                docx_zip.writestr(name, content)

        logger.debug(f"Generated {len(self._parts)} parts for {self.name}")
        return buffer.getvalue()

    def __repr__(self) -> str:
        return f"DocxPackage(name={self.name!r}, parts={len(self._parts)})"
