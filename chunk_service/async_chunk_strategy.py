import asyncio

from .chunk_strategy import ChunkStrategy
from .models.upload_progress_dto import UploadProgressDto


class AsyncChunkStrategy:
    """Awaitable facade over ``ChunkStrategy`` for asyncio services.

    Filesystem work and bitmap locking run in worker threads, so concurrent
    tasks saving chunks never block the event loop.
    """

    def __init__(self, strategy: ChunkStrategy) -> None:
        self.strategy = strategy

    @property
    def file_id(self) -> str:
        return self.strategy.file_id

    async def save_chunk(self, chunk_data: bytes, chunk_index: int) -> None:
        await asyncio.to_thread(self.strategy.save_chunk, chunk_data, chunk_index)

    async def merge_chunks(self) -> None:
        await asyncio.to_thread(self.strategy.merge_chunks)

    async def progress(self) -> UploadProgressDto | None:
        return await asyncio.to_thread(self.strategy.progress)
