import os
from pathlib import Path
from threading import Lock
from typing import Any, TypeVar, cast

import aiomqtt
from dotenv import load_dotenv

from app.components.configuration.configuration import Configuration
from app.components.configuration.configuration_interface import ConfigurationInterface
from app.components.logger.logger import DEFAULT_LOG_FORMAT, Logger
from app.components.logger.logger_interface import LoggerInterface


load_dotenv()

T = TypeVar("T")

SUPPORTED_ENVIRONMENTS: frozenset[str] = frozenset(
    {"development", "staging", "production"}
)

# Keys the service reads. Logged at start-up even when set only in the environment.
CONFIGURATION_KEYS: tuple[str, ...] = (
    "LOG_FORMAT",
    "LOG_LEVEL",
    "MQTT_HOST",
    "MQTT_PORT",
    "MQTT_CLIENT_ID",
    "MQTT_KEEPALIVE",
    "MQTT_USERNAME",
    "MQTT_PASSWORD",
    "MQTT_MAX_PAYLOAD_BYTES",
    "MQTT_RECONNECT_INTERVAL",
    "SOURCE_TOPIC",
    "DEST_TOPIC",
    "THUMBNAIL_SIZE",
    "JPEG_QUALITY",
)

# Secrets never reach the start-up log.
_REDACTED_KEYS: frozenset[str] = frozenset({"MQTT_PASSWORD"})


class ComponentsMeta(type):
    _instances: dict[tuple[type, str], "Components"] = {}
    _lock: Lock = Lock()

    def __call__(cls, *args, **kwargs):
        env = args[0] if args else kwargs.get("env")
        if env is None:
            raise ValueError("Environment must be provided")

        env_key = str(env)
        key = (cls, env_key)
        with cls._lock:
            if key not in cls._instances:
                instance = super().__call__(*args, **kwargs)
                cls._instances[key] = instance
        return cls._instances[key]


class Components(metaclass=ComponentsMeta):
    """
    Per-environment registry of the process-wide collaborators.

    Must be created from inside a running event loop: the MQTT client binds to
    the loop it is constructed on.
    """

    def __init__(self, env: str, config_path: str) -> None:
        self.__env: str = env
        root_dir: str = str(Path(__file__).resolve().parents[2])
        self.__config_path: str = os.path.join(root_dir, config_path)
        self.__components: dict[type[Any], Any] = self.__bootstrap_components()

    def __bootstrap_components(self) -> dict[type[Any], Any]:
        if self.__env in SUPPORTED_ENVIRONMENTS:
            return self.__get_components()

        raise ValueError(f"Invalid environment: {self.__env}")

    def __get_components(self) -> dict[type[Any], Any]:
        configuration: ConfigurationInterface = Configuration(
            self.__env, self.__config_path
        )

        logger: LoggerInterface = Logger(
            log_format=configuration.get_configuration(
                "LOG_FORMAT", str, default=DEFAULT_LOG_FORMAT
            ),
            log_level=configuration.get_configuration("LOG_LEVEL", str, default="INFO"),
        )
        _logger_instance = logger.get_logger("Components")
        _logger_instance.info(
            "Configuration (%s): %s",
            self.__env,
            {
                key: ("***" if key in _REDACTED_KEYS else value)
                for key, value in configuration.as_dict(CONFIGURATION_KEYS).items()
            },
        )

        mqtt_client: aiomqtt.Client = aiomqtt.Client(
            hostname=configuration.get_configuration("MQTT_HOST", str),
            port=configuration.get_configuration("MQTT_PORT", int, default=1883),
            identifier=configuration.get_configuration(
                "MQTT_CLIENT_ID", str, default="thumbnail_converter"
            ),
            keepalive=configuration.get_configuration("MQTT_KEEPALIVE", int, default=30),
            username=configuration.get_configuration("MQTT_USERNAME", str, default="")
            or None,
            password=configuration.get_configuration("MQTT_PASSWORD", str, default="")
            or None,
            logger=logger.get_logger("aiomqtt"),
        )

        components: dict[type[Any], Any] = {
            ConfigurationInterface: configuration,
            LoggerInterface: logger,
            aiomqtt.Client: mqtt_client,
        }

        return components

    def get_component(self, component_name: type[T]) -> T:
        if component_name not in self.__components:
            raise ValueError(f"Component {component_name} not found")

        return cast(T, self.__components[component_name])

    def get_config_path(self) -> str:
        return self.__config_path
