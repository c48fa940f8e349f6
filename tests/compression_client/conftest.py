from unittest.mock import AsyncMock, Mock

import pytest

from src.compression_client.app.core.config import Settings
from src.compression_client.app.schemas import CompressionResult, ImageAnalysis
from src.compression_client.app.services.analysis_requester import AnalysisRequester
from src.compression_client.app.services.compression_executor import (
    CompressionExecutor,
)
from src.compression_client.app.services.domain import SourceFile
from src.compression_client.app.services.download_manager import (
    DownloadManager,
    InMemoryArtifactSink,
)
from src.compression_client.app.services.options_store import OptionsStore
from src.compression_client.app.services.workflow_controller import (
    WorkflowController,
)
from tests.shared_fixtures import SharedImageFixtures


@pytest.fixture
def mock_settings(tmp_path):
    settings = Mock(spec=Settings)
    settings.ANALYSIS_SERVICE_URL = "http://localhost:5000"
    settings.COMPRESSION_SERVICE_URL = "http://localhost:5239"
    settings.ANALYSIS_TIMEOUT = 30.0
    settings.COMPRESSION_TIMEOUT = 120.0
    settings.DOWNLOAD_TIMEOUT = 60.0
    settings.DOWNLOAD_PREFIX = "compressed_"
    settings.DOWNLOAD_DIR = str(tmp_path / "downloads")
    settings.absolute_download_dir = str(tmp_path / "downloads")
    settings.MAX_FILE_SIZE = 100 * 1024 * 1024
    settings.DEFAULT_METHOD = "traditional"
    settings.DEFAULT_QUALITY = 85
    settings.DEFAULT_ENABLE_ANALYSIS = True
    return settings


@pytest.fixture
def png_file():
    content, filename = SharedImageFixtures.load_tiny_png()
    return SourceFile(filename=filename, content=content, content_type="image/png")


@pytest.fixture
def jpeg_file():
    content, filename = SharedImageFixtures.load_small_jpeg()
    return SourceFile(filename=filename, content=content, content_type="image/jpeg")


@pytest.fixture
def large_photo():
    return SourceFile(
        filename="photo.png", content=b"\x00" * 2_000_000, content_type="image/png"
    )


@pytest.fixture
def sample_analysis_data():
    return {
        "entropy": 6.2,
        "meanIntensity": 121.5,
        "standardDeviation": 48.3,
        "dominantColors": ["#ff0000", "#00ff00"],
        "complexity": "medium",
        "recommendation": "Use hybrid compression at quality 80",
    }


@pytest.fixture
def sample_result_data():
    return {
        "id": "abc123",
        "originalSize": 2000000,
        "compressedSize": 500000,
        "compressionRatio": 4.0,
        "quality": 85,
        "method": "hybrid",
        "processingTime": 1.25,
        "downloadUrl": "/api/compression/download/abc123",
        "analysis": {"psnr": 38.2, "ssim": 0.967, "entropy": 6.1},
    }


@pytest.fixture
def sample_analysis(sample_analysis_data):
    return ImageAnalysis(**sample_analysis_data)


@pytest.fixture
def sample_result(sample_result_data):
    return CompressionResult(**sample_result_data)


@pytest.fixture
def mock_compression_executor():
    mock = Mock(spec=CompressionExecutor)
    mock.compress = AsyncMock()
    return mock


@pytest.fixture
def artifact_sink():
    return InMemoryArtifactSink()


@pytest.fixture
def analysis_requester(mock_settings, sample_analysis):
    requester = AnalysisRequester(settings=mock_settings)
    requester.analyze = AsyncMock(return_value=sample_analysis)
    return requester


@pytest.fixture
def download_manager(mock_settings, artifact_sink):
    return DownloadManager(sink=artifact_sink, settings=mock_settings)


@pytest.fixture
def workflow_controller(
    mock_settings, analysis_requester, mock_compression_executor, download_manager
):
    return WorkflowController(
        analysis_requester=analysis_requester,
        options_store=OptionsStore(settings=mock_settings),
        compression_executor=mock_compression_executor,
        download_manager=download_manager,
        settings=mock_settings,
    )
