from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, TypeVar

T = TypeVar("T")


class ConfigurationError(Exception):
    """Raised when a configuration value is missing or malformed."""


class ConfigurationInterface(ABC):
    @abstractmethod
    def get_configuration(
        self, key: str, value_type: type[T], default: T | None = None
    ) -> T:
        """
        Return the value stored under key, cast to value_type.

        Falls back to default when the key is absent. Raises ConfigurationError
        when there is neither a value nor a default, or the cast fails.
        """

    @abstractmethod
    def as_dict(self, keys: Iterable[str] = ()) -> dict[str, Any]:
        """
        Return the values in effect for every file key plus the given keys.

        Environment overrides are applied; keys set nowhere are omitted.
        """
