import aiomqtt

from app.bootstrap.components import Components
from app.components.configuration.configuration_interface import (
    ConfigurationError,
    ConfigurationInterface,
)
from app.components.logger.logger_interface import LoggerInterface
from app.entities.image import ThumbnailSpec
from app.services.ImageService.image_service import ImageService
from app.services.ImageService.image_service_interface import ImageServiceInterface
from app.services.RelayService.relay_service import RelayService
from app.services.RelayService.relay_service_interface import RelayServiceInterface


def get_thumbnail_spec(components: Components) -> ThumbnailSpec:
    """
    Build the thumbnail spec once from configuration.

    THUMBNAIL_SIZE defaults to 170 px (height of the 320x170 target screen),
    JPEG_QUALITY to 85.
    """
    configuration = components.get_component(ConfigurationInterface)

    max_dimension = configuration.get_configuration("THUMBNAIL_SIZE", int, default=170)
    jpeg_quality = configuration.get_configuration("JPEG_QUALITY", int, default=85)

    if max_dimension <= 0:
        raise ConfigurationError(
            f"THUMBNAIL_SIZE must be a positive integer, got {max_dimension}"
        )
    if not 1 <= jpeg_quality <= 100:
        raise ConfigurationError(
            f"JPEG_QUALITY must be between 1 and 100, got {jpeg_quality}"
        )

    return ThumbnailSpec(max_dimension=max_dimension, jpeg_quality=jpeg_quality)


def get_image_service() -> ImageServiceInterface:
    return ImageService()


def get_relay_service(components: Components) -> RelayServiceInterface:
    configuration = components.get_component(ConfigurationInterface)

    return RelayService(
        mqtt_client=components.get_component(aiomqtt.Client),
        image_service=get_image_service(),
        thumbnail_spec=get_thumbnail_spec(components),
        source_topic=configuration.get_configuration("SOURCE_TOPIC", str),
        dest_topic=configuration.get_configuration("DEST_TOPIC", str),
        logger=components.get_component(LoggerInterface).get_logger("RelayService"),
        max_payload_bytes=configuration.get_configuration(
            "MQTT_MAX_PAYLOAD_BYTES", int, default=512 * 1024
        ),
        reconnect_interval=configuration.get_configuration(
            "MQTT_RECONNECT_INTERVAL", float, default=1.0
        ),
    )
