from app.entities.image import ImageFormat

SIGNATURE_LENGTH: int = 4

PNG_SIGNATURE: bytes = b"\x89PNG"
JPEG_SIGNATURE: bytes = b"\xff\xd8"


def is_too_small(payload: bytes) -> bool:
    return len(payload) < SIGNATURE_LENGTH


def classify(payload: bytes) -> ImageFormat:
    """
    Classify a payload by its magic bytes without decoding it.

    Only the first four bytes are inspected. Payloads shorter than that are
    UNKNOWN; callers use is_too_small() to report them separately.
    """
    if is_too_small(payload):
        return ImageFormat.UNKNOWN

    head = bytes(payload[:SIGNATURE_LENGTH])
    if head == PNG_SIGNATURE:
        return ImageFormat.PNG
    if head.startswith(JPEG_SIGNATURE):
        return ImageFormat.JPEG
    return ImageFormat.UNKNOWN


def signature_hex(payload: bytes) -> str:
    """Render the leading signature bytes as upper-case hex pairs."""
    return " ".join(f"{byte:02X}" for byte in bytes(payload[:SIGNATURE_LENGTH]))
