"""Data Transfer Objects for inventory webhook ingestion."""

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass
class InventoryUpdateDTO:
    """DTO for a single inventory level entry as delivered by the webhook."""

    inventory_item_id: int
    location_id: int
    available: int
    updated_at: str  # ISO-8601, validated when the entity is built


@dataclass
class HttpWebhookPayload:
    """Webhook delivered directly over HTTP: raw JSON body plus request headers."""

    raw_body: str
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class EventBridgeWebhookPayload:
    """Webhook delivered through an event bus envelope."""

    event: Any


# Every transport shape the parser understands
WebhookPayload = Union[HttpWebhookPayload, EventBridgeWebhookPayload]


@dataclass
class ParsedEnvelopeDTO:
    """Result of unwrapping an event bus envelope."""

    inventory_update: InventoryUpdateDTO
    headers: dict[str, str]
    raw_body: str


@dataclass
class ParsedWebhookDTO:
    """Canonical webhook shape handed to the processing pipeline."""

    shop_name: str
    topic: str
    signature: str | None
    raw_body: str
    inventory_levels: list[InventoryUpdateDTO] | None = None  # None: still inside raw_body


@dataclass
class ProcessInventoryWebhookRequestDTO:
    """Input for the inventory webhook pipeline."""

    shop_name: str
    raw_body: str
    signature: str | None
    inventory_levels: list[InventoryUpdateDTO] | None = None


@dataclass
class ItemErrorDTO:
    """A persistence failure for one position of the batch."""

    index: int
    reason: str

    def to_dict(self) -> dict:
        return {"index": self.index, "reason": self.reason}


@dataclass
class ProcessInventoryWebhookResultDTO:
    """Outcome of a processed webhook."""

    success: bool
    processed_count: int
    errors: list[ItemErrorDTO] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "processedCount": self.processed_count,
            "errors": [error.to_dict() for error in self.errors],
        }
