from abc import ABC, abstractmethod

from app.entities.image import ThumbnailResult, ThumbnailSpec


class ImageServiceInterface(ABC):
    @abstractmethod
    def transcode(self, payload: bytes, spec: ThumbnailSpec) -> ThumbnailResult:
        """
        Decode, resize-to-fit, strip to RGB and encode a payload as JPEG.

        Raises:
            DecodeFailedError: The payload could not be decoded.
            EncodeFailedError: The resized image could not be encoded.
        """

    @abstractmethod
    def convert(self, payload: bytes, spec: ThumbnailSpec) -> ThumbnailResult:
        """
        Sniff the payload format and transcode it when it is PNG or JPEG.

        Raises:
            PayloadTooSmallError: Fewer than four bytes were received.
            UnrecognizedFormatError: The signature is neither PNG nor JPEG.
            DecodeFailedError: The payload could not be decoded.
            EncodeFailedError: The resized image could not be encoded.
        """
