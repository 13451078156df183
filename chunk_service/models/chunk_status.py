from dataclasses import dataclass, field
from threading import RLock


@dataclass
class ChunkStatus:
    statuses: list[bool] = field(default_factory=list)
    lock: RLock = field(default_factory=RLock)

    def all_uploaded(self, total_chunks: int) -> bool:
        # a cleared entry (after a merge) never counts as complete
        return len(self.statuses) == total_chunks and all(self.statuses)
