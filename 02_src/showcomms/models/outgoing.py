"""Outgoing delivery queue data models."""

from dataclasses import dataclass

from .messages import Attachment, DeliveryState


@dataclass
class OutgoingQueueEntry:
    """Delivery record of one locally authored message.

    Only client_message_id is required; None fields mean "leave unchanged"
    when the entry is written over an existing one.
    """

    client_message_id: str
    body_text: str | None = None
    attachments: list[Attachment] | None = None
    language_hint: str | None = None
    delivery_state: DeliveryState | None = None
    error_message: str | None = None
