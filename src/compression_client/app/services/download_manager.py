from pathlib import Path
from typing import Protocol

import aiofiles
import httpx
from loguru import logger

from ..core.config import Settings
from ..schemas import CompressionResult
from .domain import DownloadedArtifact, DownloadError, ResultUnavailableError

DOWNLOAD_FAILURE_MESSAGE = "Failed to download compressed image"
FALLBACK_SOURCE_NAME = "image"


class ArtifactSink(Protocol):
    async def save(self, filename: str, content: bytes) -> str | None: ...


class DirectoryArtifactSink:
    def __init__(self, directory: str):
        self.directory = Path(directory)

    async def save(self, filename: str, content: bytes) -> str | None:
        self.directory.mkdir(parents=True, exist_ok=True)
        target_path = self.directory / filename

        async with aiofiles.open(target_path, "wb") as f:
            await f.write(content)

        logger.info(f"Saved {len(content)} bytes to {target_path}")
        return str(target_path)


class InMemoryArtifactSink:
    """Keeps the latest payload for hosts that stream the bytes themselves."""

    def __init__(self):
        self.latest: tuple[str, bytes] | None = None

    async def save(self, filename: str, content: bytes) -> str | None:
        self.latest = (filename, content)
        return None


class DownloadManager:
    def __init__(
        self,
        sink: ArtifactSink | None = None,
        settings: Settings | None = None,
    ):
        from ..core.config import get_settings

        self.settings = settings or get_settings()
        self.base_url = self.settings.COMPRESSION_SERVICE_URL
        self.sink = sink or DirectoryArtifactSink(self.settings.absolute_download_dir)

    def artifact_filename(self, source_name: str | None) -> str:
        base_name = Path(source_name).name if source_name else ""
        return f"{self.settings.DOWNLOAD_PREFIX}{base_name or FALLBACK_SOURCE_NAME}"

    async def fetch(self, result: CompressionResult | None) -> bytes:
        if result is None:
            raise ResultUnavailableError("No compression result to download")

        url = f"{self.base_url}/api/compression/download/{result.id}"

        logger.info(f"Downloading compressed artifact {result.id}")

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.DOWNLOAD_TIMEOUT
            ) as client:
                response = await client.get(url)

                if not response.is_success:
                    logger.error(
                        f"Download of {result.id} failed with HTTP {response.status_code}"
                    )
                    raise DownloadError(DOWNLOAD_FAILURE_MESSAGE)

                return response.content

        except DownloadError:
            raise

        except httpx.RequestError as e:
            logger.error(f"Network error downloading {result.id}: {e}")
            raise DownloadError(DOWNLOAD_FAILURE_MESSAGE) from e

        except Exception as e:
            logger.exception(f"Unexpected error downloading {result.id}: {e}")
            raise DownloadError(DOWNLOAD_FAILURE_MESSAGE) from e

    async def persist(self, source_name: str | None, content: bytes) -> DownloadedArtifact:
        filename = self.artifact_filename(source_name)

        try:
            location = await self.sink.save(filename, content)
        except OSError as e:
            logger.error(f"Failed to persist {filename}: {e}")
            raise DownloadError(DOWNLOAD_FAILURE_MESSAGE) from e

        return DownloadedArtifact(filename=filename, content=content, location=location)

    async def download(
        self, result: CompressionResult | None, source_name: str | None
    ) -> DownloadedArtifact:
        content = await self.fetch(result)
        return await self.persist(source_name, content)
