"""Repository layer for data access."""

from server.repositories.file_repository import FileRepository

__all__ = [
    "FileRepository",
]
