from typing import Callable
import pytest
from faker import Faker
from chunk_service.chunk_strategy import ChunkStrategy
from chunk_service.naming import default_chunk_naming
from chunk_service.registry import ChunkStatusRegistry

fake = Faker()

StrategyFactory = Callable[..., ChunkStrategy]


@pytest.fixture(name="registry")
def fixture_registry() -> ChunkStatusRegistry:
    return ChunkStatusRegistry()


@pytest.fixture(name="upload_dir")
def fixture_upload_dir(tmp_path) -> str:
    return str(tmp_path / "uploads")


@pytest.fixture(name="file_id")
def fixture_file_id() -> str:
    return str(fake.uuid4())


@pytest.fixture(name="make_strategy")
def fixture_make_strategy(
    registry: ChunkStatusRegistry, upload_dir: str, file_id: str
) -> StrategyFactory:
    def _make(total_chunks: int = 3, start_chunk_index: int = 0, **kwargs) -> ChunkStrategy:
        params = {
            "start_chunk_index": start_chunk_index,
            "upload_dir": upload_dir,
            "file_id": file_id,
            "file_name": "merged.bin",
            "total_chunks": total_chunks,
            "file_name_func": default_chunk_naming,
            "registry": registry,
        }
        params.update(kwargs)
        return ChunkStrategy(**params)

    return _make
