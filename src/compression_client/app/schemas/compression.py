from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MIN_QUALITY = 10
MAX_QUALITY = 100

BYTES_PER_MB = 1024 * 1024


class CompressionMethod(str, Enum):
    TRADITIONAL = "traditional"
    ML = "ml"
    HYBRID = "hybrid"


class CompressionOptions(BaseModel):
    """User-configured parameters sent with every compression request."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, validate_assignment=True
    )

    method: CompressionMethod = Field(
        default=CompressionMethod.TRADITIONAL, description="Compression method"
    )
    quality: int = Field(default=85, description="Target quality (10-100)")
    target_size_kb: Optional[int] = Field(
        default=None,
        alias="targetSizeKB",
        description="Optional target size in kilobytes",
    )
    enable_analysis: bool = Field(
        default=True, description="Request quality metrics with the result"
    )

    @field_validator("quality", mode="before")
    @classmethod
    def clamp_quality(cls, value: Any) -> int:
        try:
            quality = int(value)
        except (TypeError, ValueError):
            raise ValueError("quality must be an integer")
        return min(max(quality, MIN_QUALITY), MAX_QUALITY)

    @field_validator("target_size_kb", mode="before")
    @classmethod
    def normalize_target_size(cls, value: Any) -> Optional[int]:
        if value is None or value == "" or isinstance(value, bool):
            return None
        try:
            target = int(value)
        except (TypeError, ValueError):
            return None
        return target if target > 0 else None

    def to_form_fields(self) -> dict[str, str]:
        fields = {
            "method": self.method.value,
            "quality": str(self.quality),
        }
        if self.target_size_kb is not None:
            fields["targetSizeKB"] = str(self.target_size_kb)
        fields["enableAnalysis"] = "true" if self.enable_analysis else "false"
        return fields


class ImageAnalysis(BaseModel):
    """Pre-compression assessment returned by the analysis service."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    entropy: float = Field(..., description="Shannon entropy of the image")
    mean_intensity: float = Field(..., description="Mean pixel intensity")
    standard_deviation: float = Field(..., description="Pixel intensity spread")
    dominant_colors: list[str] = Field(
        default_factory=list, description="Dominant colors, most frequent first"
    )
    complexity: Literal["low", "medium", "high"] = Field(
        ..., description="Estimated visual complexity"
    )
    recommendation: str = Field(default="", description="Suggested settings")


class QualityMetrics(BaseModel):
    """Optional quality metrics computed by the compression service."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    psnr: Optional[float] = None
    ssim: Optional[float] = None
    mse: Optional[float] = None
    entropy: Optional[float] = None
    color_histogram_similarity: Optional[float] = None
    edge_preservation: Optional[float] = None


class CompressionResult(BaseModel):
    """Successful response of the compression service."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Opaque result identifier")
    original_size: int = Field(..., description="Original size in bytes")
    compressed_size: int = Field(..., description="Compressed size in bytes")
    compression_ratio: float = Field(..., description="original / compressed")
    quality: int = Field(..., description="Quality actually used")
    method: str = Field(..., description="Method actually used")
    processing_time: float = Field(..., description="Server time in seconds")
    download_url: str = Field(default="", description="Server-side download link")
    analysis: Optional[QualityMetrics] = Field(
        default=None, description="Quality metrics when analysis was enabled"
    )

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> str:
        return str(value)

    @property
    def compression_percent(self) -> float:
        if self.original_size <= 0:
            return 0.0
        return (self.original_size - self.compressed_size) / self.original_size * 100.0

    @property
    def original_size_mb(self) -> float:
        return self.original_size / BYTES_PER_MB

    @property
    def compressed_size_mb(self) -> float:
        return self.compressed_size / BYTES_PER_MB
