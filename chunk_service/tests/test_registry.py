from concurrent.futures import ThreadPoolExecutor

from faker import Faker
from chunk_service.registry import ChunkStatusRegistry

fake = Faker()


def test_get_or_create_returns_same_entry(registry: ChunkStatusRegistry) -> None:
    file_id = str(fake.uuid4())

    first = registry.get_or_create(file_id, 3)
    second = registry.get_or_create(file_id, 5)

    assert first is second
    assert first.statuses == [False, False, False]
    assert len(registry) == 1


def test_get_or_create_is_thread_safe(registry: ChunkStatusRegistry) -> None:
    file_id = str(fake.uuid4())

    with ThreadPoolExecutor(max_workers=8) as executor:
        entries = list(executor.map(lambda _: registry.get_or_create(file_id, 4), range(32)))

    assert all(entry is entries[0] for entry in entries)


def test_entries_have_independent_locks(registry: ChunkStatusRegistry) -> None:
    first = registry.get_or_create("first", 1)
    second = registry.get_or_create("second", 1)

    assert first.lock is not second.lock


def test_reset_if_mismatched(registry: ChunkStatusRegistry) -> None:
    entry = registry.get_or_create("file", 2)
    entry.statuses[0] = True

    registry.reset_if_mismatched("file", entry, 2)
    assert entry.statuses == [True, False]

    registry.reset_if_mismatched("file", entry, 4)
    assert entry.statuses == [False] * 4


def test_all_uploaded_requires_matching_length(registry: ChunkStatusRegistry) -> None:
    entry = registry.get_or_create("file", 2)
    entry.statuses = [True, True]

    assert entry.all_uploaded(2)
    assert not entry.all_uploaded(3)

    entry.statuses.clear()
    assert not entry.all_uploaded(2)


def test_progress(registry: ChunkStatusRegistry) -> None:
    entry = registry.get_or_create("file", 4)
    entry.statuses[1] = True
    entry.statuses[3] = True

    progress = registry.progress("file", 4)

    assert progress.file_id == "file"
    assert progress.total_chunks == 4
    assert progress.uploaded_chunks == [1, 3]
    assert progress.missing_chunks == [0, 2]
    assert not progress.is_complete


def test_progress_with_other_chunk_count(registry: ChunkStatusRegistry) -> None:
    registry.get_or_create("file", 2).statuses = [True, True]

    progress = registry.progress("file", 3)

    assert progress.uploaded_chunks == []
    assert progress.missing_chunks == [0, 1, 2]


def test_progress_unknown_file(registry: ChunkStatusRegistry) -> None:
    assert registry.progress("unknown", 3) is None


def test_discard(registry: ChunkStatusRegistry) -> None:
    registry.get_or_create("file", 1)

    assert registry.discard("file") is True
    assert "file" not in registry
    assert registry.discard("file") is False
