"""Version information for DOCX Merger."""

__version__ = "1.0.0"
