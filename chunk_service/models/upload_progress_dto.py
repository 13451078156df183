from pydantic.dataclasses import dataclass


@dataclass
class UploadProgressDto:
    file_id: str
    total_chunks: int
    uploaded_chunks: list[int]
    missing_chunks: list[int]

    @property
    def is_complete(self) -> bool:
        return not self.missing_chunks
