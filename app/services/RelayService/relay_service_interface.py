from abc import ABC, abstractmethod


class RelayServiceInterface(ABC):
    @abstractmethod
    async def start(self) -> None:
        """Connect to the broker and relay thumbnails until stopped."""
        raise NotImplementedError

    @abstractmethod
    async def stop(self) -> None:
        """Stop relaying and leave the broker."""
        raise NotImplementedError

    @abstractmethod
    async def handle_message(self, topic: str, payload: bytes) -> bool:
        """Convert one inbound payload; True when a thumbnail was published."""
        raise NotImplementedError
