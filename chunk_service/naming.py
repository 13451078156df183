import hashlib
from typing import Protocol


class ChunkNaming(Protocol):
    """Maps a file identifier and chunk index to a path relative to the upload dir.

    Implementations must be pure: the same arguments always give the same
    path, and calls may happen concurrently from several threads.
    """

    def __call__(self, file_id: str, chunk_index: int) -> str: ...


def default_chunk_naming(file_id: str, chunk_index: int) -> str:
    return f"{file_id}_{chunk_index}.part"


def hashed_chunk_naming(file_id: str, chunk_index: int) -> str:
    """Like ``default_chunk_naming`` but safe for arbitrary identifiers."""
    digest = hashlib.sha256(file_id.encode("utf-8")).hexdigest()[:16]
    return f"{digest}_{chunk_index}.part"
