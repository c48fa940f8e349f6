from urllib.parse import quote

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response
from loguru import logger

from ..core.config import Settings
from ..core.dependencies import get_settings_dependency, get_workflow_controller
from ..schemas import CompressionOptions, WorkflowSnapshot
from ..services.domain import SourceFile, WorkflowState
from ..services.workflow_controller import WorkflowController

router = APIRouter()


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback name and an RFC 5987 name."""
    fallback = filename.encode("ascii", "ignore").decode("ascii")
    fallback = "".join(c for c in fallback if c not in '"\\' and c.isprintable())
    return (
        f'attachment; filename="{fallback or "download"}"; '
        f"filename*=UTF-8''{quote(filename, safe='')}"
    )


@router.get("/workflow", response_model=WorkflowSnapshot)
async def get_workflow(
    controller: WorkflowController = Depends(get_workflow_controller),
):
    """Current workflow state, options, analysis, result and notice."""
    return controller.snapshot()


@router.post("/workflow/file", response_model=WorkflowSnapshot)
async def select_file(
    file: UploadFile = File(...),
    controller: WorkflowController = Depends(get_workflow_controller),
    settings: Settings = Depends(get_settings_dependency),
):
    """
    Select the image to compress, replacing any previous selection.

    Args:
        file: Image file; anything that is not an image is rejected

    Returns:
        WorkflowSnapshot after the selection, with analysis pending

    Raises:
        HTTPException: For empty, oversized or non-image uploads
    """
    logger.info(f"Received file selection: {file.filename}")

    if not file.filename:
        raise HTTPException(status_code=400, detail="No file provided")

    file_data = await file.read()

    if len(file_data) == 0:
        raise HTTPException(status_code=400, detail="Empty file provided")

    if len(file_data) > settings.MAX_FILE_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {settings.MAX_FILE_SIZE // (1024 * 1024)}MB",
        )

    source_file = SourceFile(
        filename=file.filename, content=file_data, content_type=file.content_type
    )

    if not controller.select_file(source_file):
        raise HTTPException(status_code=415, detail="File is not an image")

    return controller.snapshot()


@router.put("/workflow/options", response_model=CompressionOptions)
async def set_options(
    options: CompressionOptions,
    controller: WorkflowController = Depends(get_workflow_controller),
):
    """Replace the compression options used by the next compression."""
    return controller.set_options(options)


@router.post("/workflow/compress", response_model=WorkflowSnapshot)
async def compress(
    controller: WorkflowController = Depends(get_workflow_controller),
):
    """
    Compress the selected file with the current options.

    Raises:
        HTTPException: 400 without a file, 409 while a compression is in
            flight, 502 when the compression service reports a failure
    """
    state = controller.state

    if state == WorkflowState.IDLE:
        raise HTTPException(status_code=400, detail="No file selected")

    if state == WorkflowState.COMPRESSING:
        raise HTTPException(status_code=409, detail="Compression already in progress")

    await controller.compress()

    if controller.state == WorkflowState.FAILED:
        raise HTTPException(
            status_code=502, detail=controller.result_store.error_message
        )

    return controller.snapshot()


@router.get("/workflow/download")
async def download(
    controller: WorkflowController = Depends(get_workflow_controller),
):
    """
    Download the compressed artifact of the current result.

    Returns:
        Binary payload named after the selected file

    Raises:
        HTTPException: 409 without a completed result, 502 on download failure
    """
    if controller.state != WorkflowState.COMPLETED:
        raise HTTPException(status_code=409, detail="No compressed image available")

    artifact = await controller.download()

    if artifact is None:
        raise HTTPException(
            status_code=502,
            detail=controller.result_store.error_message or "Download discarded",
        )

    return Response(
        content=artifact.content,
        media_type="application/octet-stream",
        headers={"Content-Disposition": content_disposition(artifact.filename)},
    )


@router.delete("/workflow/notice", response_model=WorkflowSnapshot)
async def dismiss_notice(
    controller: WorkflowController = Depends(get_workflow_controller),
):
    """Dismiss the current error or success notice."""
    controller.dismiss_notice()
    return controller.snapshot()
