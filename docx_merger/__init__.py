"""
DOCX Merger - concatenates Microsoft Word DOCX documents into one package.

The first document becomes the output package; every input contributes its
styles, numbering definitions, media files, relationships, content types and
body content. Style and numbering ids are renamed per input so that equally
named definitions of different documents do not clash.

Main Components:
- DocxMerger: merge orchestrator (``merge`` then ``save``)
- merge_documents: one-call API writing the result to a file
- DocxPackage: in-memory DOCX package with parsed XML parts
- MergeOptions: page break, load and generate settings
"""

from .api import describe_package, merge_documents
from .config import GenerateOptions, LoadOptions, MergeOptions
from .exceptions import (
    ConfigurationError,
    DanglingMediaReferenceError,
    DocxMergerError,
    MergeError,
    MissingPartError,
    PackageLoadError,
    ParseError,
    SaveError,
)
from .merger import DocxMerger
from .parser import DocxPackage
from .version import __version__

__all__ = [
    # Merging
    "DocxMerger",
    "merge_documents",
    "describe_package",
    "DocxPackage",

    # Options
    "MergeOptions",
    "LoadOptions",
    "GenerateOptions",

    # Exceptions
    "DocxMergerError",
    "MergeError",
    "SaveError",
    "PackageLoadError",
    "MissingPartError",
    "ParseError",
    "DanglingMediaReferenceError",
    "ConfigurationError",

    "__version__",
]
