"""Persistence of session transcripts."""

from .file_manager import FileManager

__all__ = ["FileManager"]
