from .analysis_requester import AnalysisRequester
from .compression_executor import CompressionExecutor
from .download_manager import (
    DirectoryArtifactSink,
    DownloadManager,
    InMemoryArtifactSink,
)
from .options_store import OptionsStore
from .result_store import ResultStore
from .selection import SelectionManager
from .workflow_controller import WorkflowController

__all__ = [
    "AnalysisRequester",
    "CompressionExecutor",
    "DirectoryArtifactSink",
    "DownloadManager",
    "InMemoryArtifactSink",
    "OptionsStore",
    "ResultStore",
    "SelectionManager",
    "WorkflowController",
]
