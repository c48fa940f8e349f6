from .compression import (
    CompressionMethod,
    CompressionOptions,
    CompressionResult,
    ImageAnalysis,
    QualityMetrics,
)
from .workflow import NoticeResponse, WorkflowSnapshot

__all__ = [
    "CompressionMethod",
    "CompressionOptions",
    "CompressionResult",
    "ImageAnalysis",
    "QualityMetrics",
    "NoticeResponse",
    "WorkflowSnapshot",
]
