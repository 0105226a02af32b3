from dataclasses import dataclass
from enum import Enum


class ImageFormat(str, Enum):
    """Classification derived from the leading signature bytes of a payload."""

    PNG = "PNG"
    JPEG = "JPEG"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class ThumbnailSpec:
    """Target bounding box (square) and JPEG quality for every conversion."""

    max_dimension: int
    jpeg_quality: int


@dataclass(frozen=True)
class ThumbnailResult:
    """Encoded JPEG plus the figures the relay reports after a conversion."""

    data: bytes
    source_format: ImageFormat
    source_size: tuple[int, int]
    output_size: tuple[int, int]
    source_bytes: int

    @property
    def reduction_percent(self) -> float:
        if self.source_bytes == 0:
            return 0.0
        return (1.0 - len(self.data) / self.source_bytes) * 100.0
