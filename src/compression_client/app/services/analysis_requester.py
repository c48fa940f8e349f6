import asyncio
from typing import Callable

import httpx
from loguru import logger

from ..core.config import Settings
from ..schemas import ImageAnalysis
from .domain import AnalysisError, SourceFile

AnalysisCallback = Callable[[int, ImageAnalysis | None], None]


class AnalysisRequester:
    def __init__(self, settings: Settings | None = None):
        from ..core.config import get_settings

        self.settings = settings or get_settings()
        self.base_url = self.settings.ANALYSIS_SERVICE_URL
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending_count(self) -> int:
        return len(self._tasks)

    async def analyze(self, source_file: SourceFile) -> ImageAnalysis:
        url = f"{self.base_url}/api/analyze"

        logger.info(f"Requesting analysis for {source_file.filename}")

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.ANALYSIS_TIMEOUT
            ) as client:
                response = await client.post(
                    url,
                    files={
                        "image": (
                            source_file.filename,
                            source_file.content,
                            source_file.content_type or "application/octet-stream",
                        )
                    },
                )

                if not response.is_success:
                    raise AnalysisError(f"HTTP {response.status_code}: {response.text}")

                data = response.json()

                logger.info(f"Analysis available for {source_file.filename}")

                return ImageAnalysis(**data)

        except AnalysisError:
            raise

        except httpx.TimeoutException as e:
            raise AnalysisError(f"Request timeout: {str(e)}") from e

        except httpx.RequestError as e:
            raise AnalysisError(f"Network error: {str(e)}") from e

        except Exception as e:
            raise AnalysisError(f"Unexpected error: {str(e)}") from e

    def start(
        self,
        source_file: SourceFile,
        generation: int,
        on_complete: AnalysisCallback,
    ) -> asyncio.Task:
        task = asyncio.create_task(
            self._run_analysis(source_file, generation, on_complete),
            name=f"analysis-{generation}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_analysis(
        self,
        source_file: SourceFile,
        generation: int,
        on_complete: AnalysisCallback,
    ) -> None:
        try:
            analysis = await self.analyze(source_file)
        except AnalysisError as e:
            logger.warning(f"Image analysis failed for {source_file.filename}: {e}")
            analysis = None

        on_complete(generation, analysis)

    async def wait_idle(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_all(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
