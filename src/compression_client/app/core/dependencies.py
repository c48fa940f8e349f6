from functools import lru_cache

from ..core.config import Settings, get_settings
from ..services.analysis_requester import AnalysisRequester
from ..services.compression_executor import CompressionExecutor
from ..services.download_manager import DownloadManager, InMemoryArtifactSink
from ..services.options_store import OptionsStore
from ..services.workflow_controller import WorkflowController


@lru_cache()
def get_settings_dependency() -> Settings:
    return get_settings()


@lru_cache()
def get_analysis_requester() -> AnalysisRequester:
    return AnalysisRequester(settings=get_settings())


@lru_cache()
def get_compression_executor() -> CompressionExecutor:
    return CompressionExecutor(settings=get_settings())


def get_download_manager() -> DownloadManager:
    # The REST surface streams the payload back to the browser.
    return DownloadManager(sink=InMemoryArtifactSink(), settings=get_settings())


@lru_cache()
def get_workflow_controller() -> WorkflowController:
    settings = get_settings()
    return WorkflowController(
        analysis_requester=get_analysis_requester(),
        options_store=OptionsStore(settings=settings),
        compression_executor=get_compression_executor(),
        download_manager=get_download_manager(),
        settings=settings,
    )
