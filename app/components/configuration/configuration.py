import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any, TypeVar, cast

import yaml

from app.components.configuration.configuration_interface import (
    ConfigurationError,
    ConfigurationInterface,
)

T = TypeVar("T")

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


class Configuration(ConfigurationInterface):
    """
    Environment-scoped configuration.

    Values come from ``<config_path>/<env>.yaml``. An environment variable with
    the same name as a key takes precedence over the file, so deployments can
    override single values without shipping a new file.
    """

    def __init__(self, env: str, config_path: str) -> None:
        self.env: str = env
        self.config_file: Path = Path(config_path) / f"{env}.yaml"
        self.__values: dict[str, Any] = self.__load()

    def __load(self) -> dict[str, Any]:
        if not self.config_file.is_file():
            raise ConfigurationError(
                f"Configuration file not found: {self.config_file}"
            )

        with self.config_file.open(encoding="utf-8") as handle:
            try:
                loaded = yaml.safe_load(handle) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(
                    f"Invalid YAML in {self.config_file}: {exc}"
                ) from exc

        if not isinstance(loaded, dict):
            raise ConfigurationError(
                f"Configuration file {self.config_file} must contain a mapping"
            )

        return {str(key): value for key, value in loaded.items()}

    def get_configuration(
        self, key: str, value_type: type[T], default: T | None = None
    ) -> T:
        raw: Any = os.getenv(key)
        if raw is None:
            raw = self.__values.get(key)

        if raw is None:
            if default is not None:
                return default
            raise ConfigurationError(f"Missing configuration key: {key}")

        return self.__cast(key, raw, value_type)

    def as_dict(self, keys: Iterable[str] = ()) -> dict[str, Any]:
        resolved: dict[str, Any] = {}
        for key in [*self.__values, *keys]:
            value = os.getenv(key, self.__values.get(key))
            if value is not None:
                resolved[key] = value
        return resolved

    @staticmethod
    def __cast(key: str, raw: Any, value_type: type[T]) -> T:
        if isinstance(raw, value_type) and not (
            value_type is int and isinstance(raw, bool)
        ):
            return raw

        if value_type is bool:
            text = str(raw).strip().lower()
            if text in _TRUE_VALUES:
                return cast(T, True)
            if text in _FALSE_VALUES:
                return cast(T, False)
            raise ConfigurationError(f"Configuration key {key} is not a boolean: {raw!r}")

        try:
            return value_type(raw)  # type: ignore[call-arg]
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"Configuration key {key} cannot be read as {value_type.__name__}: {raw!r}"
            ) from exc
