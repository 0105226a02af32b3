import logging
from pathlib import Path

import aiomqtt
import pytest

from app.bootstrap.components import Components, ComponentsMeta
from app.components.configuration.configuration_interface import ConfigurationInterface
from app.components.logger.logger_interface import LoggerInterface

CONFIG_YAML = """
LOG_LEVEL: INFO
MQTT_HOST: broker.local
MQTT_PORT: 1884
MQTT_PASSWORD: hunter2
SOURCE_TOPIC: source/thumbnail
DEST_TOPIC: dest/thumbnail_small
"""


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    for env in ("development", "staging"):
        (tmp_path / f"{env}.yaml").write_text(CONFIG_YAML, encoding="utf-8")
    return tmp_path


@pytest.fixture(autouse=True)
def isolated_components():
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    ComponentsMeta._instances.clear()
    yield
    ComponentsMeta._instances.clear()
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.mark.unit
class TestComponents:
    """Test suite for the per-environment component registry."""

    def test_invalid_environment_raises(self, config_dir: Path) -> None:
        with pytest.raises(ValueError) as exc_info:
            Components("testing", str(config_dir))

        assert "Invalid environment" in str(exc_info.value)

    def test_environment_is_required(self) -> None:
        with pytest.raises(ValueError):
            Components(config_path="configuration")

    @pytest.mark.asyncio
    async def test_registers_configuration_logger_and_mqtt_client(
        self, config_dir: Path
    ) -> None:
        components = Components("development", str(config_dir))

        configuration = components.get_component(ConfigurationInterface)
        assert configuration.get_configuration("MQTT_PORT", int) == 1884
        assert isinstance(components.get_component(LoggerInterface), LoggerInterface)
        assert isinstance(components.get_component(aiomqtt.Client), aiomqtt.Client)
        assert components.get_config_path() == str(config_dir)

    @pytest.mark.asyncio
    async def test_one_instance_per_environment(self, config_dir: Path) -> None:
        first = Components("development", str(config_dir))
        second = Components("development", str(config_dir))
        staging = Components("staging", str(config_dir))

        assert first is second
        assert staging is not first

    @pytest.mark.asyncio
    async def test_unknown_component_raises(self, config_dir: Path) -> None:
        components = Components("development", str(config_dir))

        with pytest.raises(ValueError):
            components.get_component(dict)

    @pytest.mark.asyncio
    async def test_password_is_not_logged(
        self, config_dir: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.INFO, logger="Components")

        Components("development", str(config_dir))

        assert "broker.local" in caplog.text
        assert "hunter2" not in caplog.text

    @pytest.mark.asyncio
    async def test_startup_log_shows_environment_overrides(
        self,
        config_dir: Path,
        caplog: pytest.LogCaptureFixture,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        caplog.set_level(logging.INFO, logger="Components")
        monkeypatch.setenv("MQTT_HOST", "192.168.16.100")
        monkeypatch.setenv("MQTT_USERNAME", "relay")

        Components("development", str(config_dir))

        assert "'MQTT_HOST': '192.168.16.100'" in caplog.text
        assert "'MQTT_USERNAME': 'relay'" in caplog.text
        assert "broker.local" not in caplog.text
