from loguru import logger

from .domain import SelectionError, SourceFile


class SelectionManager:
    """Holds the single selected source file and its selection generation.

    Every accepted selection bumps the generation. Asynchronous work captures
    the generation when it starts and is only applied while it still matches.
    """

    def __init__(self):
        self._current: SourceFile | None = None
        self._generation = 0

    @property
    def current(self) -> SourceFile | None:
        return self._current

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def has_file(self) -> bool:
        return self._current is not None

    def select(self, source_file: SourceFile) -> int | None:
        if not source_file.is_image:
            logger.debug(f"Ignoring non-image payload {source_file.filename}")
            return None

        self._current = source_file
        self._generation += 1

        logger.info(
            f"Selected {source_file.filename} ({source_file.size_mb:.2f} MB), "
            f"generation {self._generation}"
        )
        return self._generation

    def is_current(self, generation: int) -> bool:
        return self._current is not None and generation == self._generation

    def require(self) -> SourceFile:
        if self._current is None:
            raise SelectionError("No file selected")
        return self._current
