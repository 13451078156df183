from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChunkServiceSettings(BaseSettings):
    """
    Class for storing settings for chunked uploads.
    """

    upload_dir: str = Field(
        default="uploads",
        description="Directory where chunk fragments and merged files are stored.",
    )
    atomic_writes: bool = Field(
        default=True,
        description="Write chunks to a temporary file and rename it into place, so an interrupted write never leaves a truncated chunk behind.",
    )

    model_config = SettingsConfigDict(env_prefix="CHUNK_SERVICE_", env_file=".env")


@lru_cache()
def get_settings() -> ChunkServiceSettings:
    return ChunkServiceSettings()
