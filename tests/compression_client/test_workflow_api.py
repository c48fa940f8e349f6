from unittest.mock import AsyncMock, Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.compression_client.app.api import workflow
from src.compression_client.app.core.dependencies import (
    get_settings_dependency,
    get_workflow_controller,
)
from src.compression_client.app.services.analysis_requester import AnalysisRequester
from src.compression_client.app.services.domain import (
    CompressionError,
    DownloadedArtifact,
    DownloadError,
)
from src.compression_client.app.services.download_manager import DownloadManager
from src.compression_client.app.services.options_store import OptionsStore
from src.compression_client.app.services.workflow_controller import (
    WorkflowController,
)
from tests.shared_fixtures import SharedImageFixtures


@pytest.fixture
def mock_analysis_requester():
    mock = Mock(spec=AnalysisRequester)
    mock.start = Mock()
    mock.wait_idle = AsyncMock()
    mock.cancel_all = AsyncMock()
    return mock


@pytest.fixture
def mock_download_manager():
    mock = Mock(spec=DownloadManager)
    mock.fetch = AsyncMock(return_value=b"compressed-bytes")
    mock.persist = AsyncMock(
        return_value=DownloadedArtifact(
            filename="compressed_photo.png", content=b"compressed-bytes"
        )
    )
    return mock


@pytest.fixture
def controller(
    mock_settings,
    mock_analysis_requester,
    mock_compression_executor,
    mock_download_manager,
):
    return WorkflowController(
        analysis_requester=mock_analysis_requester,
        options_store=OptionsStore(settings=mock_settings),
        compression_executor=mock_compression_executor,
        download_manager=mock_download_manager,
        settings=mock_settings,
    )


@pytest.fixture
def client(controller, mock_settings):
    app = FastAPI()

    # Override FastAPI dependencies with test objects
    app.dependency_overrides[get_workflow_controller] = lambda: controller
    app.dependency_overrides[get_settings_dependency] = lambda: mock_settings

    app.include_router(workflow.router, prefix="/api", tags=["workflow"])

    return TestClient(app)


@pytest.fixture
def png_upload():
    content, filename = SharedImageFixtures.load_tiny_png()
    return {"file": (filename, content, "image/png")}


class TestWorkflowStateEndpoint:
    def test_idle_workflow(self, client):
        response = client.get("/api/workflow")

        assert response.status_code == 200
        data = response.json()
        assert data["state"] == "idle"
        assert data["analysisStatus"] == "unstarted"
        assert data["fileName"] is None
        assert data["options"] == {
            "method": "traditional",
            "quality": 85,
            "targetSizeKB": None,
            "enableAnalysis": True,
        }


class TestFileSelectionEndpoint:
    def test_select_image(self, client, png_upload, mock_analysis_requester):
        response = client.post("/api/workflow/file", files=png_upload)

        assert response.status_code == 200
        data = response.json()
        assert data["state"] == "file_selected"
        assert data["analysisStatus"] == "pending"
        assert data["fileName"] == "photo.png"
        assert data["fileSize"] == len(png_upload["file"][1])

        mock_analysis_requester.start.assert_called_once()
        source_file, generation, _ = mock_analysis_requester.start.call_args[0]
        assert source_file.filename == "photo.png"
        assert generation == 1

    def test_select_non_image(self, client, mock_analysis_requester):
        response = client.post(
            "/api/workflow/file",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 415
        mock_analysis_requester.start.assert_not_called()

    def test_select_empty_file(self, client):
        response = client.post(
            "/api/workflow/file", files={"file": ("empty.png", b"", "image/png")}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Empty file provided"

    def test_select_oversized_file(self, client, mock_settings, png_upload):
        mock_settings.MAX_FILE_SIZE = 10

        response = client.post("/api/workflow/file", files=png_upload)

        assert response.status_code == 413

    def test_select_while_compressing_keeps_workflow_busy(
        self, client, controller, png_upload, mock_compression_executor
    ):
        client.post("/api/workflow/file", files=png_upload)
        controller._compressing_generation = controller.selection.generation

        response = client.post(
            "/api/workflow/file",
            files={"file": ("photo2.png", png_upload["file"][1], "image/png")},
        )

        assert response.status_code == 200
        assert response.json()["fileName"] == "photo2.png"
        assert response.json()["state"] == "compressing"

        response = client.post("/api/workflow/compress")

        assert response.status_code == 409
        mock_compression_executor.compress.assert_not_called()

    def test_select_without_file(self, client):
        response = client.post("/api/workflow/file")

        assert response.status_code == 422


class TestOptionsEndpoint:
    def test_set_options(self, client, controller):
        response = client.put(
            "/api/workflow/options",
            json={
                "method": "hybrid",
                "quality": 150,
                "targetSizeKB": 0,
                "enableAnalysis": False,
            },
        )

        assert response.status_code == 200
        assert response.json() == {
            "method": "hybrid",
            "quality": 100,
            "targetSizeKB": None,
            "enableAnalysis": False,
        }
        assert controller.options.quality == 100

    def test_set_invalid_method(self, client):
        response = client.put("/api/workflow/options", json={"method": "zip"})

        assert response.status_code == 422

    def test_set_null_quality(self, client, controller):
        response = client.put("/api/workflow/options", json={"quality": None})

        assert response.status_code == 422
        assert controller.options.quality == 85

    def test_set_non_numeric_quality(self, client):
        response = client.put("/api/workflow/options", json={"quality": "best"})

        assert response.status_code == 422


class TestCompressEndpoint:
    def test_compress_without_file(self, client, mock_compression_executor):
        response = client.post("/api/workflow/compress")

        assert response.status_code == 400
        mock_compression_executor.compress.assert_not_called()

    def test_compress_success(
        self, client, png_upload, mock_compression_executor, sample_result
    ):
        mock_compression_executor.compress.return_value = sample_result
        client.post("/api/workflow/file", files=png_upload)

        response = client.post("/api/workflow/compress")

        assert response.status_code == 200
        data = response.json()
        assert data["state"] == "completed"
        assert data["result"]["id"] == "abc123"
        assert data["result"]["compressedSize"] == 500000
        assert data["compressionPercent"] == 75.0
        assert data["notice"] == {
            "kind": "success",
            "message": "Image compressed successfully!",
        }

    def test_compress_failure(self, client, png_upload, mock_compression_executor):
        mock_compression_executor.compress.side_effect = CompressionError(
            "invalid quality"
        )
        client.post("/api/workflow/file", files=png_upload)

        response = client.post("/api/workflow/compress")

        assert response.status_code == 502
        assert response.json()["detail"] == "invalid quality"

        state = client.get("/api/workflow").json()
        assert state["state"] == "failed"
        assert state["notice"] == {"kind": "error", "message": "invalid quality"}


class TestDownloadEndpoint:
    def test_download_without_result(self, client, mock_download_manager):
        response = client.get("/api/workflow/download")

        assert response.status_code == 409
        mock_download_manager.fetch.assert_not_called()

    def test_download_success(
        self,
        client,
        png_upload,
        mock_compression_executor,
        mock_download_manager,
        sample_result,
    ):
        mock_compression_executor.compress.return_value = sample_result
        client.post("/api/workflow/file", files=png_upload)
        client.post("/api/workflow/compress")

        response = client.get("/api/workflow/download")

        assert response.status_code == 200
        assert response.content == b"compressed-bytes"
        assert (
            response.headers["content-disposition"]
            == 'attachment; filename="compressed_photo.png"; '
            "filename*=UTF-8''compressed_photo.png"
        )
        mock_download_manager.fetch.assert_awaited_once_with(sample_result)
        mock_download_manager.persist.assert_awaited_once_with(
            "photo.png", b"compressed-bytes"
        )

    def test_download_escapes_filename(
        self,
        client,
        png_upload,
        mock_compression_executor,
        mock_download_manager,
        sample_result,
    ):
        mock_compression_executor.compress.return_value = sample_result
        mock_download_manager.persist.return_value = DownloadedArtifact(
            filename='compressed_my"photo.png', content=b"compressed-bytes"
        )
        client.post("/api/workflow/file", files=png_upload)
        client.post("/api/workflow/compress")

        response = client.get("/api/workflow/download")

        assert response.status_code == 200
        assert response.headers["content-disposition"] == (
            'attachment; filename="compressed_myphoto.png"; '
            "filename*=UTF-8''compressed_my%22photo.png"
        )

    def test_download_failure(
        self,
        client,
        png_upload,
        mock_compression_executor,
        mock_download_manager,
        sample_result,
    ):
        mock_compression_executor.compress.return_value = sample_result
        mock_download_manager.fetch.side_effect = DownloadError(
            "Failed to download compressed image"
        )
        client.post("/api/workflow/file", files=png_upload)
        client.post("/api/workflow/compress")

        response = client.get("/api/workflow/download")

        assert response.status_code == 502
        assert response.json()["detail"] == "Failed to download compressed image"
        assert client.get("/api/workflow").json()["state"] == "completed"


class TestNoticeEndpoint:
    def test_dismiss_notice(self, client, png_upload, mock_compression_executor):
        mock_compression_executor.compress.side_effect = CompressionError("boom")
        client.post("/api/workflow/file", files=png_upload)
        client.post("/api/workflow/compress")

        response = client.delete("/api/workflow/notice")

        assert response.status_code == 200
        assert response.json()["notice"] is None
        assert response.json()["state"] == "failed"


class TestContentDisposition:
    def test_non_ascii_filename(self):
        header = workflow.content_disposition("compressed_фото.png")

        assert header == (
            'attachment; filename="compressed_.png"; '
            "filename*=UTF-8''compressed_%D1%84%D0%BE%D1%82%D0%BE.png"
        )

    def test_header_breaking_characters_are_removed(self):
        header = workflow.content_disposition('a"\r\nb.png')

        assert "\r" not in header and "\n" not in header
        assert header.startswith('attachment; filename="ab.png"; ')
