from typing import TypedDict


class InboundMessage(TypedDict):
    """Raw publish received from the broker."""

    payload: bytes
    topic: str
