"""In-process signal models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Topic(str, Enum):
    """EventBus topics."""

    CONNECTIVITY = "connectivity"
    DELIVERY = "delivery"


@dataclass
class BusMessage:
    """A signal exchanged through EventBus."""

    id: str
    topic: Topic
    payload: dict  # varies by topic
    source: str  # component that published
    timestamp: datetime
