import logging
import os
from typing import Any
from uuid import uuid4
import fsspec

from .exceptions import (
    CreateDirectoryError,
    CreateOutputFileError,
    IndexOutOfBoundsError,
    MergeError,
    ReadChunkError,
    WriteChunkError,
    WriteOutputError,
)
from .models.upload_progress_dto import UploadProgressDto
from .naming import ChunkNaming, default_chunk_naming
from .registry import UPLOADING_FILES, ChunkStatusRegistry
from .settings import ChunkServiceSettings

logger = logging.getLogger("chunk_service")


class ChunkStrategy:
    """Saves the chunks of one file and merges them once all have arrived.

    A strategy is scoped to a single ``file_id``. Several strategies for the
    same ``file_id`` (one per request, for instance) share their progress
    through the registry, so chunks may be saved from any thread in any
    order and any number of times.
    """

    local_client: Any = None

    # pylint: disable=too-many-arguments
    def __init__(
        self,
        start_chunk_index: int,
        upload_dir: str,
        file_id: str,
        file_name: str,
        total_chunks: int,
        file_name_func: ChunkNaming,
        registry: ChunkStatusRegistry | None = None,
        atomic_writes: bool = True,
    ) -> None:
        if start_chunk_index < 0 or start_chunk_index >= total_chunks:
            raise IndexOutOfBoundsError(start_chunk_index, total_chunks)

        self.start_chunk_index = start_chunk_index
        self.upload_dir = upload_dir
        self.file_id = file_id
        self.file_name = file_name
        self.total_chunks = total_chunks
        self.file_name_func = file_name_func
        self.registry = registry if registry is not None else UPLOADING_FILES
        self.atomic_writes = atomic_writes
        # not shared with other strategies
        self.local_client = fsspec.filesystem("file", skip_instance_cache=True)

    @classmethod
    def from_settings(
        cls,
        settings: ChunkServiceSettings,
        file_id: str,
        file_name: str,
        total_chunks: int,
        start_chunk_index: int = 0,
        file_name_func: ChunkNaming = default_chunk_naming,
        registry: ChunkStatusRegistry | None = None,
    ) -> "ChunkStrategy":
        return cls(
            start_chunk_index=start_chunk_index,
            upload_dir=settings.upload_dir,
            file_id=file_id,
            file_name=file_name,
            total_chunks=total_chunks,
            file_name_func=file_name_func,
            registry=registry,
            atomic_writes=settings.atomic_writes,
        )

    def get_chunk_path(self, chunk_index: int) -> str:
        return os.path.join(
            self.upload_dir, self.file_name_func(self.file_id, chunk_index)
        )

    def get_final_path(self) -> str:
        return os.path.join(self.upload_dir, self.file_name)

    def progress(self) -> UploadProgressDto | None:
        return self.registry.progress(self.file_id, self.total_chunks)

    def save_chunk(self, chunk_data: bytes, chunk_index: int) -> None:
        """Persist one chunk and mark it as uploaded.

        The chunk is written before its index is validated against
        ``total_chunks``, so an ``IndexOutOfBoundsError`` leaves the
        fragment on disk.
        """
        if chunk_index < 0:
            raise IndexOutOfBoundsError(chunk_index, self.total_chunks)

        chunk_path = self.get_chunk_path(chunk_index)
        self._ensure_directory(self.upload_dir)
        self._ensure_directory(os.path.dirname(chunk_path))
        self._write_chunk(chunk_path, chunk_data)

        entry = self.registry.get_or_create(self.file_id, self.total_chunks)
        with entry.lock:
            self.registry.reset_if_mismatched(self.file_id, entry, self.total_chunks)
            if chunk_index >= len(entry.statuses):
                logger.error(
                    "Chunk index out of bounds",
                    extra={
                        "file_id": self.file_id,
                        "chunk_index": chunk_index,
                        "total_chunks": self.total_chunks,
                    },
                )
                raise IndexOutOfBoundsError(chunk_index, self.total_chunks)
            entry.statuses[chunk_index] = True

        logger.debug(
            "Chunk saved",
            extra={"file_id": self.file_id, "chunk_index": chunk_index},
        )

    def merge_chunks(self) -> None:
        """Concatenate chunks ``start_chunk_index..total_chunks - 1`` into the final file.

        Fails with ``MergeError`` unless every chunk in ``[0, total_chunks)``
        has been saved. The bitmap is cleared and its lock released before
        the filesystem is touched.
        """
        entry = self.registry.get_or_create(self.file_id, self.total_chunks)
        with entry.lock:
            if not entry.all_uploaded(self.total_chunks):
                logger.debug(
                    "Merge requested before all chunks were uploaded",
                    extra={"file_id": self.file_id},
                )
                raise MergeError()
            entry.statuses.clear()

        final_path = self.get_final_path()
        logger.info(
            "Merging chunks",
            extra={
                "file_id": self.file_id,
                "final_path": final_path,
                "start_chunk_index": self.start_chunk_index,
                "total_chunks": self.total_chunks,
            },
        )

        try:
            output = self.local_client.open(path=final_path, mode="wb")
        except OSError as exception:
            logger.exception(
                "Failed to create output file", extra={"final_path": final_path}
            )
            raise CreateOutputFileError(str(exception)) from exception

        with output as fobj:
            for chunk_index in range(self.start_chunk_index, self.total_chunks):
                chunk_path = self.get_chunk_path(chunk_index)
                chunk_data = self._read_chunk(chunk_path)
                try:
                    fobj.write(chunk_data)
                except OSError as exception:
                    logger.exception(
                        "Failed to append chunk to output file",
                        extra={"final_path": final_path, "chunk_index": chunk_index},
                    )
                    raise WriteOutputError(str(exception)) from exception
                self._remove_chunk(chunk_path)

        logger.info(
            "Chunks merged",
            extra={"file_id": self.file_id, "final_path": final_path},
        )

    def _ensure_directory(self, path: str) -> None:
        if not path or self.local_client.exists(path):
            return
        try:
            self.local_client.makedirs(path, exist_ok=True)
        except OSError as exception:
            logger.exception("Failed to create directory", extra={"path": path})
            raise CreateDirectoryError(str(exception)) from exception

    def _write_chunk(self, chunk_path: str, chunk_data: bytes) -> None:
        target_path = (
            f"{chunk_path}.{uuid4().hex}.tmp" if self.atomic_writes else chunk_path
        )
        try:
            with self.local_client.open(path=target_path, mode="wb") as fobj:
                fobj.write(chunk_data)
            if self.atomic_writes:
                self.local_client.mv(target_path, chunk_path)
        except OSError as exception:
            logger.exception("Failed to write chunk", extra={"chunk_path": chunk_path})
            if self.atomic_writes and self.local_client.exists(target_path):
                self._remove_chunk(target_path)
            raise WriteChunkError(
                f"Failed to write chunk to {chunk_path}: {exception}"
            ) from exception

    def _read_chunk(self, chunk_path: str) -> bytes:
        try:
            with self.local_client.open(path=chunk_path, mode="rb") as fobj:
                content: bytes = fobj.read()
        except OSError as exception:
            logger.exception("Failed to read chunk", extra={"chunk_path": chunk_path})
            raise ReadChunkError(
                f"Failed to read chunk from {chunk_path}: {exception}"
            ) from exception
        return content

    def _remove_chunk(self, chunk_path: str) -> None:
        try:
            self.local_client.rm_file(chunk_path)
            logger.debug("Chunk removed", extra={"chunk_path": chunk_path})
        except OSError:
            logger.warning(
                "Failed to remove chunk",
                extra={"chunk_path": chunk_path},
                exc_info=True,
            )
