# src/inventory_domain/infrastructure/parsers/webhook_payload_parser.py
"""Parsing and structural validation of Shopify inventory webhook payloads."""

import json
from typing import Any, Optional

from src.common.dtos.inventory_dtos import (
    EventBridgeWebhookPayload,
    HttpWebhookPayload,
    InventoryUpdateDTO,
    ParsedEnvelopeDTO,
    ParsedWebhookDTO,
    WebhookPayload,
)
from src.common.exceptions.custom_exceptions import PayloadParseError, ValidationError

# Header names are matched case-insensitively
SHOP_DOMAIN_HEADERS = ("x-shopify-shop-domain",)
TOPIC_HEADERS = ("x-shopify-topic",)
SIGNATURE_HEADERS = ("x-shopify-hmac-sha256",)

UNKNOWN_TOPIC = "unknown"

# (field, expected type, description used in error messages)
_UPDATE_FIELDS = (
    ("inventory_item_id", int, "must be an integer"),
    ("location_id", int, "must be an integer"),
    ("available", int, "must be an integer"),
    ("updated_at", str, "must be a string (ISO 8601)"),
)

_ENVELOPE_STRING_FIELDS = ("version", "id", "detail-type", "source")


class WebhookPayloadParser:
    """Turns transport payloads into typed inventory update DTOs."""

    def parse_webhook(self, payload: WebhookPayload) -> ParsedWebhookDTO:
        """
        Normalises any supported transport payload into a ParsedWebhookDTO.

        The HTTP body is left unparsed (inventory_levels is None) so that the
        signature can be checked before the body is interpreted. The event bus
        form has to be unwrapped first to reach its headers, so its single
        update is returned already parsed.
        """
        if isinstance(payload, HttpWebhookPayload):
            return ParsedWebhookDTO(
                shop_name=self.extract_shop_name(payload.headers),
                topic=self.extract_topic(payload.headers),
                signature=self.extract_signature(payload.headers),
                raw_body=payload.raw_body,
            )
        if isinstance(payload, EventBridgeWebhookPayload):
            envelope = self.parse_event_envelope(payload.event)
            return ParsedWebhookDTO(
                shop_name=self.extract_shop_name(envelope.headers),
                topic=self.extract_topic(envelope.headers),
                signature=self.extract_signature(envelope.headers),
                raw_body=envelope.raw_body,
                inventory_levels=[envelope.inventory_update],
            )
        raise ValidationError(f"Unsupported webhook payload type: {type(payload).__name__}")

    def parse_inventory_levels(self, raw_body: str) -> list[InventoryUpdateDTO]:
        """Parses a webhook body of the form {"inventory_levels": [...]}."""
        try:
            payload = json.loads(raw_body)
        except (json.JSONDecodeError, TypeError) as e:
            raise PayloadParseError(original_exception=e)

        if not isinstance(payload, dict) or not isinstance(payload.get("inventory_levels"), list):
            raise ValidationError("Invalid payload: missing or invalid inventory_levels array", field="inventory_levels")

        return [self._to_inventory_update(level, index) for index, level in enumerate(payload["inventory_levels"])]

    def parse_event_envelope(self, event: Any) -> ParsedEnvelopeDTO:
        """Unwraps an EventBridge event whose detail carries payload and metadata."""
        if not isinstance(event, dict):
            raise ValidationError("Invalid EventBridge event: not an object")

        for key in _ENVELOPE_STRING_FIELDS:
            if not isinstance(event.get(key), str):
                raise ValidationError(f"Invalid EventBridge event: {key} must be a string", field=key)

        detail = event.get("detail")
        if not isinstance(detail, dict):
            raise ValidationError("Invalid EventBridge event: detail must be an object", field="detail")

        metadata = detail.get("metadata")
        if not isinstance(metadata, dict) or not all(isinstance(v, str) for v in metadata.values() if v is not None):
            raise ValidationError("Invalid EventBridge detail: metadata must map header names to strings", field="metadata")

        payload = detail.get("payload")
        inventory_update = self._to_inventory_update(payload, 0)

        return ParsedEnvelopeDTO(
            inventory_update=inventory_update,
            headers={k: v for k, v in metadata.items() if v is not None},
            raw_body=json.dumps(payload, separators=(",", ":"), ensure_ascii=False),
        )

    @staticmethod
    def extract_shop_name(headers: dict[str, str]) -> str:
        shop_domain = WebhookPayloadParser._find_header(headers, SHOP_DOMAIN_HEADERS)
        if not shop_domain:
            raise ValidationError("Invalid request: unable to extract shop name from headers", field="shop_name")
        return shop_domain

    @staticmethod
    def extract_topic(headers: dict[str, str]) -> str:
        return WebhookPayloadParser._find_header(headers, TOPIC_HEADERS) or UNKNOWN_TOPIC

    @staticmethod
    def extract_signature(headers: dict[str, str]) -> Optional[str]:
        return WebhookPayloadParser._find_header(headers, SIGNATURE_HEADERS)

    @staticmethod
    def _find_header(headers: dict[str, str] | None, names: tuple[str, ...]) -> Optional[str]:
        if not headers:
            return None
        lowered = {str(key).lower(): value for key, value in headers.items()}
        for name in names:
            value = lowered.get(name)
            if value:
                return value
        return None

    @staticmethod
    def _to_inventory_update(level: Any, index: int) -> InventoryUpdateDTO:
        if not isinstance(level, dict):
            raise ValidationError(f"Invalid inventory level at index {index}: not an object", index=index)

        for field_name, expected_type, description in _UPDATE_FIELDS:
            value = level.get(field_name)
            # bool is an int subclass but never a valid id or count
            if not isinstance(value, expected_type) or isinstance(value, bool):
                raise ValidationError(
                    f"Invalid {field_name} at index {index}: {description}", field=field_name, index=index
                )

        return InventoryUpdateDTO(
            inventory_item_id=level["inventory_item_id"],
            location_id=level["location_id"],
            available=level["available"],
            updated_at=level["updated_at"],
        )
