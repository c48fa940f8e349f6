from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .compression import CompressionOptions, CompressionResult, ImageAnalysis


class NoticeResponse(BaseModel):
    """The single live error or success notice."""

    kind: str = Field(..., description="Notice kind (error, success)")
    message: str = Field(..., description="Message shown to the user")


class WorkflowSnapshot(BaseModel):
    """Externally observable state of the compression workflow."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    state: str = Field(
        ...,
        description="Workflow state (idle, file_selected, compressing, completed, failed)",
    )
    analysis_status: str = Field(
        ..., description="Analysis state (unstarted, pending, available, unavailable)"
    )
    file_name: Optional[str] = Field(None, description="Selected file name")
    file_size: Optional[int] = Field(None, description="Selected file size in bytes")
    options: CompressionOptions = Field(..., description="Current compression options")
    analysis: Optional[ImageAnalysis] = Field(
        None, description="Analysis of the selected file, when available"
    )
    result: Optional[CompressionResult] = Field(
        None, description="Most recent compression result"
    )
    compression_percent: Optional[float] = Field(
        None, description="Size reduction of the result as a percentage"
    )
    notice: Optional[NoticeResponse] = Field(None, description="Live notice")
