from loguru import logger

from ..core.config import Settings
from ..schemas import (
    CompressionOptions,
    CompressionResult,
    ImageAnalysis,
    NoticeResponse,
    WorkflowSnapshot,
)
from .analysis_requester import AnalysisRequester
from .compression_executor import CompressionExecutor
from .domain import (
    AnalysisStatus,
    CompressionError,
    DownloadedArtifact,
    DownloadError,
    SelectionError,
    SourceFile,
    WorkflowState,
)
from .download_manager import DownloadManager
from .options_store import OptionsStore
from .result_store import ResultStore
from .selection import SelectionManager


class WorkflowController:
    """Single entry point for every mutation of the compression workflow.

    The main state is derived from the selected file, the compression call in
    flight (for any generation), the stored result and the failure flag.
    Analysis status is tracked separately and never blocks the main state.

    Asynchronous completions (analysis, compression, download) carry the
    selection generation captured when they started; a completion whose
    generation is no longer current is dropped.
    """

    def __init__(
        self,
        selection: SelectionManager | None = None,
        analysis_requester: AnalysisRequester | None = None,
        options_store: OptionsStore | None = None,
        compression_executor: CompressionExecutor | None = None,
        result_store: ResultStore | None = None,
        download_manager: DownloadManager | None = None,
        settings: Settings | None = None,
    ):
        from ..core.config import get_settings

        self.settings = settings or get_settings()
        self.selection = selection or SelectionManager()
        self.analysis_requester = analysis_requester or AnalysisRequester(
            settings=self.settings
        )
        self.options_store = options_store or OptionsStore(settings=self.settings)
        self.compression_executor = compression_executor or CompressionExecutor(
            settings=self.settings
        )
        self.result_store = result_store or ResultStore()
        self.download_manager = download_manager or DownloadManager(
            settings=self.settings
        )

        self.analysis: ImageAnalysis | None = None
        self.analysis_status = AnalysisStatus.UNSTARTED
        self._compressing_generation: int | None = None
        self._failed = False

    @property
    def state(self) -> WorkflowState:
        if not self.selection.has_file:
            return WorkflowState.IDLE
        if self._compressing_generation is not None:
            return WorkflowState.COMPRESSING
        if self.result_store.result is not None:
            return WorkflowState.COMPLETED
        if self._failed:
            return WorkflowState.FAILED
        return WorkflowState.FILE_SELECTED

    @property
    def options(self) -> CompressionOptions:
        return self.options_store.get()

    def select_file(self, source_file: SourceFile) -> bool:
        """Replace the selected file and reset everything tied to the old one.

        Must be called on the running event loop: the analysis request for the
        new file is scheduled as a background task. A compression call still in
        flight for the previous file keeps the workflow busy until it returns;
        its outcome is then dropped.
        """
        generation = self.selection.select(source_file)
        if generation is None:
            return False

        self.result_store.clear()
        self._failed = False
        self.analysis = None
        self.analysis_status = AnalysisStatus.PENDING

        self.analysis_requester.start(
            source_file, generation, self._on_analysis_complete
        )
        return True

    def _on_analysis_complete(
        self, generation: int, analysis: ImageAnalysis | None
    ) -> None:
        if not self.selection.is_current(generation):
            logger.info(f"Discarding stale analysis for generation {generation}")
            return

        if analysis is None:
            self.analysis_status = AnalysisStatus.UNAVAILABLE
            return

        self.analysis = analysis
        self.analysis_status = AnalysisStatus.AVAILABLE

    async def wait_for_analysis(self) -> None:
        await self.analysis_requester.wait_idle()

    def set_options(self, options: CompressionOptions) -> CompressionOptions:
        return self.options_store.set(options)

    def update_options(self, **changes) -> CompressionOptions:
        return self.options_store.update(**changes)

    async def compress(self) -> CompressionResult | None:
        try:
            source_file = self.selection.require()
        except SelectionError as e:
            logger.warning(f"Compression not started: {e}")
            return None

        if self._compressing_generation is not None:
            logger.warning(
                f"Compression already in progress for {source_file.filename}, "
                "ignoring request"
            )
            return None

        generation = self.selection.generation
        options = self.options_store.get()

        self.result_store.clear()
        self._failed = False
        self._compressing_generation = generation

        try:
            result = await self.compression_executor.compress(source_file, options)

        except CompressionError as e:
            if self.selection.is_current(generation):
                logger.error(f"Compression error for {source_file.filename}: {e}")
                self.result_store.set_error(str(e))
                self._failed = True
            else:
                logger.info(
                    f"Discarding compression failure for superseded generation {generation}"
                )
            return None

        finally:
            if self._compressing_generation == generation:
                self._compressing_generation = None

        if not self.selection.is_current(generation):
            logger.info(
                f"Discarding compression result for superseded generation {generation}"
            )
            return None

        self.result_store.set_result(result)
        return result

    async def download(self) -> DownloadedArtifact | None:
        if self.state != WorkflowState.COMPLETED:
            logger.warning(f"Download not available in state {self.state.value}")
            return None

        result = self.result_store.result
        source_name = self.selection.current.filename
        generation = self.selection.generation

        self.result_store.dismiss_notice()

        try:
            content = await self.download_manager.fetch(result)

            if not self._download_still_relevant(generation, result):
                logger.info(
                    f"Discarding download of {result.id}, result superseded "
                    f"(generation {generation})"
                )
                return None

            return await self.download_manager.persist(source_name, content)

        except SelectionError as e:
            logger.warning(f"Download not started: {e}")
            return None

        except DownloadError as e:
            if self._download_still_relevant(generation, result):
                self.result_store.set_error(str(e))
            return None

    def _download_still_relevant(
        self, generation: int, result: CompressionResult
    ) -> bool:
        return (
            self.selection.is_current(generation)
            and self.result_store.result is result
        )

    def dismiss_notice(self) -> None:
        self.result_store.dismiss_notice()

    def snapshot(self) -> WorkflowSnapshot:
        source_file = self.selection.current
        result = self.result_store.result
        notice = self.result_store.notice

        return WorkflowSnapshot(
            state=self.state.value,
            analysis_status=self.analysis_status.value,
            file_name=source_file.filename if source_file else None,
            file_size=source_file.size if source_file else None,
            options=self.options_store.get(),
            analysis=self.analysis,
            result=result,
            compression_percent=round(result.compression_percent, 1)
            if result
            else None,
            notice=NoticeResponse(kind=notice.kind.value, message=notice.message)
            if notice
            else None,
        )

    async def shutdown(self) -> None:
        await self.analysis_requester.cancel_all()
