import logging
from threading import Lock

from .models.chunk_status import ChunkStatus
from .models.upload_progress_dto import UploadProgressDto

logger = logging.getLogger("chunk_service")


class ChunkStatusRegistry:
    """Per-file completion bitmaps shared by every session of a process.

    The registry lock only guards lookups and inserts. Reads and writes of
    a bitmap happen under the lock of its own ``ChunkStatus`` so that
    different files never contend with each other.
    """

    def __init__(self) -> None:
        self._entries: dict[str, ChunkStatus] = {}
        self._lock = Lock()

    def __contains__(self, file_id: object) -> bool:
        with self._lock:
            return file_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_or_create(self, file_id: str, total_chunks: int) -> ChunkStatus:
        with self._lock:
            entry = self._entries.get(file_id)
            if entry is None:
                entry = ChunkStatus(statuses=[False] * total_chunks)
                self._entries[file_id] = entry
                logger.debug(
                    "Chunk status created",
                    extra={"file_id": file_id, "total_chunks": total_chunks},
                )
        return entry

    @staticmethod
    def reset_if_mismatched(
        file_id: str, entry: ChunkStatus, total_chunks: int
    ) -> None:
        """Reset a bitmap recorded for another chunk count. Caller holds entry.lock."""
        if len(entry.statuses) == total_chunks:
            return
        if entry.statuses:
            logger.warning(
                "Chunk count changed, discarding recorded progress",
                extra={
                    "file_id": file_id,
                    "recorded_chunks": len(entry.statuses),
                    "total_chunks": total_chunks,
                },
            )
        entry.statuses = [False] * total_chunks

    def progress(self, file_id: str, total_chunks: int) -> UploadProgressDto | None:
        with self._lock:
            entry = self._entries.get(file_id)
        if entry is None:
            return None

        with entry.lock:
            statuses = (
                list(entry.statuses)
                if len(entry.statuses) == total_chunks
                else [False] * total_chunks
            )

        return UploadProgressDto(
            file_id=file_id,
            total_chunks=total_chunks,
            uploaded_chunks=[i for i, done in enumerate(statuses) if done],
            missing_chunks=[i for i, done in enumerate(statuses) if not done],
        )

    def discard(self, file_id: str) -> bool:
        """Drop the bitmap of a file. Returns False if none was tracked.

        Only discard uploads with no save or merge in flight: a concurrent
        ``save_chunk`` that already fetched the entry records its chunk on
        the dropped bitmap, and that progress is lost.
        """
        with self._lock:
            entry = self._entries.pop(file_id, None)
        if entry is None:
            return False
        logger.debug("Chunk status discarded", extra={"file_id": file_id})
        return True


UPLOADING_FILES = ChunkStatusRegistry()
