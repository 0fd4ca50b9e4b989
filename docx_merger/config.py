"""
Merge options for DOCX Merger.

Handles page-break behaviour, archive load/generate settings and the opt-in
relationship renaming policy.
"""

from typing import Any, Dict, Mapping, Optional
import zipfile

from .exceptions import ConfigurationError

COMPRESSION_METHODS: Dict[str, int] = {
    "DEFLATE": zipfile.ZIP_DEFLATED,
    "STORE": zipfile.ZIP_STORED,
}


class LoadOptions:
    """Options applied when opening source packages."""

    def __init__(self, check_crc32: bool = False):
        """
        Initializes load options.

        Args:
            check_crc32: Verify the CRC of every archive member on open
        """
        self.check_crc32 = check_crc32

    def __repr__(self) -> str:
        return f"LoadOptions(check_crc32={self.check_crc32!r})"


class GenerateOptions:
    """Options applied when writing the merged package."""

    def __init__(self, compression: str = "DEFLATE", compression_level: Optional[int] = 4):
        """
        Initializes generate options.

        Args:
            compression: ``"DEFLATE"`` or ``"STORE"``
            compression_level: zlib level 0-9, ignored for ``"STORE"``
        """
        compression = compression.upper()
        if compression not in COMPRESSION_METHODS:
            raise ConfigurationError(
                f"Unsupported compression: {compression}",
                f"expected one of {', '.join(COMPRESSION_METHODS)}",
            )
        if compression_level is not None and not 0 <= compression_level <= 9:
            raise ConfigurationError(f"Compression level out of range: {compression_level}", "expected 0-9")
        self.compression = compression
        self.compression_level = compression_level

    @property
    def zip_compression(self) -> int:
        """zipfile constant for the configured compression."""
        return COMPRESSION_METHODS[self.compression]

    def __repr__(self) -> str:
        return f"GenerateOptions(compression={self.compression!r}, compression_level={self.compression_level!r})"


class MergeOptions:
    """Document merge options."""

    def __init__(
        self,
        page_break: bool = True,
        load_options: Optional[LoadOptions] = None,
        generate_options: Optional[GenerateOptions] = None,
        rename_colliding_relationships: bool = False,
    ):
        """
        Initializes merge options.

        Args:
            page_break: Insert a page break between consecutive sources
            load_options: Settings used when opening sources
            generate_options: Settings used when writing the output
            rename_colliding_relationships: Rename a later source's relationship
                whose id is already taken by a different relationship instead
                of dropping it
        """
        self.page_break = page_break
        self.load_options = load_options or LoadOptions()
        self.generate_options = generate_options or GenerateOptions()
        self.rename_colliding_relationships = rename_colliding_relationships

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "MergeOptions":
        """
        Build options from a plain mapping.

        Nested ``load_options`` and ``generate_options`` may be mappings or
        option instances.

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        data = dict(data or {})
        known = {"page_break", "load_options", "generate_options", "rename_colliding_relationships"}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError("Unknown merge options", ", ".join(sorted(unknown)))

        load = data.get("load_options")
        if isinstance(load, Mapping):
            load = _build(LoadOptions, load, "load_options")
        generate = data.get("generate_options")
        if isinstance(generate, Mapping):
            generate = _build(GenerateOptions, generate, "generate_options")

        return cls(
            page_break=bool(data.get("page_break", True)),
            load_options=load,
            generate_options=generate,
            rename_colliding_relationships=bool(data.get("rename_colliding_relationships", False)),
        )

    def __repr__(self) -> str:
        return (
            f"MergeOptions(page_break={self.page_break!r}, load_options={self.load_options!r}, "
            f"generate_options={self.generate_options!r}, "
            f"rename_colliding_relationships={self.rename_colliding_relationships!r})"
        )


def _build(option_cls, values: Mapping[str, Any], section: str):
    try:
        return option_cls(**values)
    except TypeError as e:
        raise ConfigurationError(f"Invalid {section}", str(e)) from e
