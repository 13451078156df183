class ChunkStrategyError(Exception):
    """Base exception for chunk saving and merging failures."""


class IndexOutOfBoundsError(ChunkStrategyError):
    """Raised when a chunk index is outside of the declared chunk range."""

    def __init__(self, index: int, total: int) -> None:
        self.index = index
        self.total = total
        super().__init__(f"Index {index} out of bounds (total chunks: {total})")


class CreateDirectoryError(ChunkStrategyError):
    """Raised when the upload directory cannot be created."""


class WriteChunkError(ChunkStrategyError):
    """Raised when a chunk payload cannot be written to disk."""


class MergeError(ChunkStrategyError):
    """Raised when merging is attempted before all chunks are uploaded."""

    def __init__(self) -> None:
        super().__init__("Not all chunks have been uploaded")


class CreateOutputFileError(ChunkStrategyError):
    """Raised when the merged output file cannot be opened."""


class ReadChunkError(ChunkStrategyError):
    """Raised when a chunk cannot be read back during merging."""


class WriteOutputError(ChunkStrategyError):
    """Raised when appending a chunk to the merged output fails."""
