from __future__ import annotations

import struct
from io import BytesIO

from PIL import Image

from app.entities.image import ImageFormat, ThumbnailResult, ThumbnailSpec
from app.services.ImageService.format_sniffer import (
    SIGNATURE_LENGTH,
    classify,
    is_too_small,
    signature_hex,
)
from app.services.ImageService.image_service_interface import ImageServiceInterface


class ConversionError(Exception):
    """Base error for a payload that cannot be turned into a thumbnail."""


class PayloadTooSmallError(ConversionError):
    def __init__(self, size_bytes: int) -> None:
        self.size_bytes = size_bytes
        super().__init__(f"Payload too small to be a valid image: {size_bytes} bytes")


class UnrecognizedFormatError(ConversionError):
    def __init__(self, signature: bytes) -> None:
        self.signature = signature
        super().__init__(f"Unknown image format: {signature_hex(signature)}")


class DecodeFailedError(ConversionError):
    """Raised when the decoder rejects the payload body."""


class EncodeFailedError(ConversionError):
    """Raised when the resized raster cannot be encoded as JPEG."""


_DECODER_ERRORS = (
    OSError,
    SyntaxError,
    ValueError,
    IndexError,
    struct.error,
    Image.DecompressionBombError,
)


def fit_within(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    """
    Scale (width, height) proportionally so both fit a square box.

    Smaller images are scaled up. Each side is kept at one pixel at least.
    """
    ratio = min(max_dimension / width, max_dimension / height)
    return (
        max(1, round(width * ratio)),
        max(1, round(height * ratio)),
    )


class ImageService(ImageServiceInterface):
    RESAMPLE_FILTER = Image.Resampling.LANCZOS

    def convert(self, payload: bytes, spec: ThumbnailSpec) -> ThumbnailResult:
        if is_too_small(payload):
            raise PayloadTooSmallError(len(payload))

        image_format = classify(payload)
        if image_format is ImageFormat.UNKNOWN:
            raise UnrecognizedFormatError(bytes(payload[:SIGNATURE_LENGTH]))

        return self._transcode(payload, spec, image_format)

    def transcode(self, payload: bytes, spec: ThumbnailSpec) -> ThumbnailResult:
        return self._transcode(payload, spec, classify(payload))

    def _transcode(
        self, payload: bytes, spec: ThumbnailSpec, image_format: ImageFormat
    ) -> ThumbnailResult:
        self._validate_spec(spec)

        image = self._decode(payload)
        source_size = image.size

        if image.width == 0 or image.height == 0:
            raise EncodeFailedError(
                f"Cannot resize an empty image ({image.width}x{image.height})"
            )

        # Pillow resamples palette images with NEAREST and premultiplies RGBA,
        # so channels are dropped before the resample.
        try:
            rgb_image = self._to_rgb8(image)
        except ValueError as exc:
            raise DecodeFailedError(
                f"Unsupported pixel layout {image.mode}: {exc}"
            ) from exc

        target = fit_within(rgb_image.width, rgb_image.height, spec.max_dimension)
        try:
            thumbnail = rgb_image.resize(target, resample=self.RESAMPLE_FILTER)
        except (ValueError, MemoryError) as exc:
            raise EncodeFailedError(f"Failed to resize image: {exc}") from exc

        data = self._encode(thumbnail, spec.jpeg_quality)

        return ThumbnailResult(
            data=data,
            source_format=image_format,
            source_size=source_size,
            output_size=thumbnail.size,
            source_bytes=len(payload),
        )

    @staticmethod
    def _to_rgb8(image: Image.Image) -> Image.Image:
        # 16-bit grayscale loads as I;16 or I; convert() would clip it at 255.
        if image.mode.startswith("I"):
            image = image.convert("I").point(lambda value: value * (1 / 256))
            image = image.convert("L")
        return image.convert("RGB")

    def _validate_spec(self, spec: ThumbnailSpec) -> None:
        if spec.max_dimension <= 0:
            raise EncodeFailedError(
                f"Target dimension must be positive, got {spec.max_dimension}"
            )
        if not 1 <= spec.jpeg_quality <= 100:
            raise EncodeFailedError(
                f"JPEG quality must be between 1 and 100, got {spec.jpeg_quality}"
            )

    def _decode(self, payload: bytes) -> Image.Image:
        if not payload:
            raise DecodeFailedError("Failed to load image: empty payload")

        try:
            image = Image.open(BytesIO(payload))
            image.load()
        except _DECODER_ERRORS as exc:
            raise DecodeFailedError(f"Failed to load image: {exc}") from exc

        return image

    def _encode(self, image: Image.Image, quality: int) -> bytes:
        buffer = BytesIO()
        try:
            image.save(
                buffer,
                format="JPEG",
                quality=quality,
                progressive=False,
                optimize=False,
            )
        except (OSError, ValueError, SystemError) as exc:
            raise EncodeFailedError(f"Failed to encode JPEG: {exc}") from exc

        return buffer.getvalue()
