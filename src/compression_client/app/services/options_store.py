from typing import Any

from loguru import logger

from ..core.config import Settings
from ..schemas import CompressionOptions


class OptionsStore:
    def __init__(self, settings: Settings | None = None):
        from ..core.config import get_settings

        self.settings = settings or get_settings()
        self._options = CompressionOptions(
            method=self.settings.DEFAULT_METHOD,
            quality=self.settings.DEFAULT_QUALITY,
            enable_analysis=self.settings.DEFAULT_ENABLE_ANALYSIS,
        )

    def get(self) -> CompressionOptions:
        """Return a snapshot; later edits never leak into it."""
        return self._options.model_copy(deep=True)

    def set(self, options: CompressionOptions) -> CompressionOptions:
        self._options = CompressionOptions.model_validate(options.model_dump())
        logger.debug(f"Compression options set: {self._options}")
        return self.get()

    def update(self, **changes: Any) -> CompressionOptions:
        merged = {**self._options.model_dump(), **changes}
        self._options = CompressionOptions.model_validate(merged)
        logger.debug(f"Compression options updated: {self._options}")
        return self.get()
