"""Storage module."""

from .media import MediaStore
from .storage import IStorage, Storage

__all__ = ["IStorage", "Storage", "MediaStore"]
