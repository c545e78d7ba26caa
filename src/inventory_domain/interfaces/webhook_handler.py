# src/inventory_domain/interfaces/webhook_handler.py
"""Maps Lambda events onto the inventory webhook pipeline and back to HTTP responses."""

import base64
import binascii
import json
import logging
from typing import Any

from src.common.config.settings import settings
from src.common.dtos.inventory_dtos import (
    EventBridgeWebhookPayload,
    HttpWebhookPayload,
    ProcessInventoryWebhookRequestDTO,
    WebhookPayload,
)
from src.common.exceptions.custom_exceptions import AuthenticationError, ValidationError
from src.inventory_domain.application.inventory_webhook_service import InventoryWebhookApplicationService
from src.inventory_domain.infrastructure.parsers.webhook_payload_parser import WebhookPayloadParser

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


def build_success_response(data: dict) -> dict:
    return {"statusCode": 200, "headers": dict(JSON_HEADERS), "body": json.dumps(data)}


def build_error_response(status_code: int, message: str, details: Any = None) -> dict:
    body = {"error": message}
    if details is not None:
        body["details"] = details
    return {"statusCode": status_code, "headers": dict(JSON_HEADERS), "body": json.dumps(body)}


class InventoryWebhookHandler:
    """Entry point shared by the API Gateway and EventBridge Lambda functions."""

    def __init__(
        self,
        webhook_service: InventoryWebhookApplicationService,
        payload_parser: WebhookPayloadParser | None = None,
        supported_topic: str | None = None,
    ) -> None:
        self.webhook_service = webhook_service
        self.payload_parser = payload_parser or WebhookPayloadParser()
        self.supported_topic = supported_topic or settings.SUPPORTED_WEBHOOK_TOPIC

    def handle_http_event(self, event: dict, context: Any = None) -> dict:
        """Handles an API Gateway (HTTP API) proxy event."""
        logger.info(f"Received webhook request {getattr(context, 'aws_request_id', None)}")

        body = event.get("body") or ""
        if body and event.get("isBase64Encoded"):
            try:
                body = base64.b64decode(body).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError):
                return build_error_response(400, "Bad request: body is not valid base64")

        if not body:
            logger.warning("Empty request body")
            return build_error_response(400, "Empty request body")

        return self._process(HttpWebhookPayload(raw_body=body, headers=event.get("headers") or {}))

    def handle_eventbridge_event(self, event: dict, context: Any = None) -> dict:
        """Handles a Shopify webhook delivered through an EventBridge partner bus."""
        logger.info(f"Received EventBridge webhook event {getattr(context, 'aws_request_id', None)}")
        return self._process(EventBridgeWebhookPayload(event=event))

    def _process(self, payload: WebhookPayload) -> dict:
        try:
            webhook = self.payload_parser.parse_webhook(payload)

            if webhook.topic != self.supported_topic:
                logger.info(f"Skipping unsupported webhook topic: {webhook.topic}")
                return build_success_response({"message": "Webhook type not supported", "processed": 0})

            result = self.webhook_service.execute(
                ProcessInventoryWebhookRequestDTO(
                    shop_name=webhook.shop_name,
                    raw_body=webhook.raw_body,
                    signature=webhook.signature,
                    inventory_levels=webhook.inventory_levels,
                )
            )

            if not result.success:
                logger.warning(
                    f"Some inventory updates failed: processed={result.processed_count}, errors={result.to_dict()['errors']}"
                )
                return build_error_response(
                    207,
                    "Partial success: some inventory updates failed",
                    {**result.to_dict(), "partialSuccess": True},
                )

            logger.info(f"Webhook processed successfully: processed={result.processed_count}")
            return build_success_response(
                {"message": "Webhook processed successfully", "processed": result.processed_count}
            )

        except AuthenticationError as e:
            logger.warning(f"Webhook signature validation failed: {e}")
            return build_error_response(401, "Unauthorized: Invalid signature")
        except ValidationError as e:
            logger.warning(f"Invalid webhook payload: {e}")
            return build_error_response(400, f"Bad request: {e.message}")
        except Exception:
            logger.exception("Unexpected error processing webhook")
            return build_error_response(500, "Internal server error")
