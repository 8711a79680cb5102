"""Attachment staging."""
from .file_stager import FileStager

__all__ = ["FileStager"]
