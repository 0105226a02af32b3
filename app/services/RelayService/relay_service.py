from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiomqtt
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    wait_fixed,
)

from app.entities.image import ThumbnailResult, ThumbnailSpec
from app.entities.message import InboundMessage
from app.services.ImageService.format_sniffer import signature_hex
from app.services.ImageService.image_service import (
    DecodeFailedError,
    EncodeFailedError,
    PayloadTooSmallError,
    UnrecognizedFormatError,
)
from app.services.ImageService.image_service_interface import ImageServiceInterface
from app.services.RelayService.relay_service_interface import RelayServiceInterface

# At-least-once on both legs.
QOS_AT_LEAST_ONCE: int = 1


class RelayService(RelayServiceInterface):
    """
    Relays thumbnails from the source topic to the destination topic.

    Messages are handled one at a time so the destination topic sees results in
    the order the source topic delivered them. Each conversion runs in a worker
    thread to keep the MQTT keepalive serviced while a large image is resized.
    """

    def __init__(
        self,
        mqtt_client: aiomqtt.Client,
        image_service: ImageServiceInterface,
        thumbnail_spec: ThumbnailSpec,
        source_topic: str,
        dest_topic: str,
        logger: logging.Logger,
        max_payload_bytes: int = 512 * 1024,
        reconnect_interval: float = 1.0,
    ) -> None:
        self.client: aiomqtt.Client = mqtt_client
        self.image_service: ImageServiceInterface = image_service
        self.thumbnail_spec: ThumbnailSpec = thumbnail_spec
        self.source_topic: str = source_topic
        self.dest_topic: str = dest_topic
        self.logger: logging.Logger = logger
        self.max_payload_bytes: int = max_payload_bytes
        self.reconnect_interval: float = reconnect_interval
        self._consumer: asyncio.Task[None] | None = None
        self.logger.info(
            "RelayService initialized: %s -> %s (%s px, quality %s)",
            self.source_topic,
            self.dest_topic,
            self.thumbnail_spec.max_dimension,
            self.thumbnail_spec.jpeg_quality,
        )

    def _make_retry_decorator(self):
        """Reconnect forever after transport errors, pausing between attempts."""
        return retry(
            retry=retry_if_exception_type(aiomqtt.MqttError),
            wait=wait_fixed(self.reconnect_interval),
            before_sleep=self._log_transport_error,
            reraise=True,
        )

    def _log_transport_error(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        self.logger.error(
            "MQTT error: %s. Reconnecting in %.1f s (attempt %s)",
            exc,
            self.reconnect_interval,
            retry_state.attempt_number,
        )

    async def start(self) -> None:
        self.logger.info("Starting thumbnail relay...")

        @self._make_retry_decorator()
        async def _consume_with_reconnect() -> None:
            await self._consume()

        self._consumer = asyncio.create_task(_consume_with_reconnect())
        try:
            await self._consumer
        except asyncio.CancelledError:
            self.logger.info("Thumbnail relay stopped.")
        finally:
            self._consumer = None

    async def stop(self) -> None:
        if self._consumer is not None and not self._consumer.done():
            self._consumer.cancel()

    async def _consume(self) -> None:
        async with self.client:
            self.logger.info("Connected to MQTT broker")

            await self.client.subscribe(self.source_topic, qos=QOS_AT_LEAST_ONCE)
            self.logger.info("Subscription confirmed: %s", self.source_topic)
            self.logger.info("Waiting for thumbnails...")

            async for message in self.client.messages:
                inbound: InboundMessage = {
                    "topic": str(message.topic),
                    "payload": self._as_bytes(message.payload),
                }
                await self.handle_message(inbound["topic"], inbound["payload"])

    @staticmethod
    def _as_bytes(payload: Any) -> bytes:
        if payload is None:
            return b""
        if isinstance(payload, (bytes, bytearray, memoryview)):
            return bytes(payload)
        return str(payload).encode("utf-8")

    async def handle_message(self, topic: str, payload: bytes) -> bool:
        self.logger.info(
            "Received thumbnail on topic '%s': %s bytes", topic, len(payload)
        )

        if len(payload) > self.max_payload_bytes:
            self.logger.warning(
                "Dropping payload of %s bytes (limit %s bytes)",
                len(payload),
                self.max_payload_bytes,
            )
            return False

        try:
            result: ThumbnailResult = await asyncio.to_thread(
                self.image_service.convert, payload, self.thumbnail_spec
            )
        except PayloadTooSmallError as error:
            self.logger.warning(
                "Payload too small to be a valid image (%s bytes)", error.size_bytes
            )
            return False
        except UnrecognizedFormatError as error:
            self.logger.warning(
                "Unknown image format: %s", signature_hex(error.signature)
            )
            return False
        except DecodeFailedError as error:
            self.logger.error("Failed to decode image: %s", error)
            return False
        except EncodeFailedError as error:
            self.logger.error("Failed to encode JPEG: %s", error)
            return False
        except Exception as exc:
            self.logger.error("Unexpected error converting thumbnail: %r", exc)
            return False

        self._log_conversion(result)
        return await self._publish(result.data)

    def _log_conversion(self, result: ThumbnailResult) -> None:
        self.logger.info("Detected %s format", result.source_format.value)
        self.logger.info(
            "Original image size: %sx%s", result.source_size[0], result.source_size[1]
        )
        self.logger.info(
            "Resized to: %sx%s", result.output_size[0], result.output_size[1]
        )
        self.logger.info(
            "Converted %s (%s bytes) to JPEG (%s bytes) - %.1f%% reduction",
            result.source_format.value,
            result.source_bytes,
            len(result.data),
            result.reduction_percent,
        )

    async def _publish(self, data: bytes) -> bool:
        self.logger.info("Publishing JPEG to '%s': %s bytes", self.dest_topic, len(data))
        try:
            await self.client.publish(
                self.dest_topic,
                payload=data,
                qos=QOS_AT_LEAST_ONCE,
                retain=False,
            )
        except aiomqtt.MqttError as exc:
            self.logger.error("Failed to publish JPEG: %s", exc)
            return False

        self.logger.info("Successfully published converted thumbnail")
        return True
