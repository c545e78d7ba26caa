"""Composition root and Lambda entry points for Shopify inventory webhook ingestion."""

import logging
from typing import Any, Callable

from src.common.config.settings import settings
from src.common.exceptions.custom_exceptions import ApplicationError, PersistenceError
from src.common.logger_config import setup_logging
from src.inventory_domain.application.inventory_webhook_service import InventoryWebhookApplicationService
from src.inventory_domain.domain.repositories.inventory_repository import IInventoryRepository
from src.inventory_domain.infrastructure.parsers.webhook_payload_parser import WebhookPayloadParser
from src.inventory_domain.infrastructure.persistence.dynamodb_inventory_repository import (
    DynamoDBInventoryRepository,
)
from src.inventory_domain.infrastructure.persistence.mysql_inventory_repository import MySQLInventoryRepository
from src.inventory_domain.infrastructure.validators.shopify_webhook_validator import ShopifyWebhookValidator
from src.inventory_domain.interfaces.webhook_handler import InventoryWebhookHandler

logger = logging.getLogger(__name__)

LambdaHandler = Callable[[dict, Any], dict]


def create_inventory_repository(backend: str | None = None) -> IInventoryRepository:
    """Builds the repository for the configured storage backend."""
    backend = (backend or settings.INVENTORY_STORE_BACKEND).lower()
    if backend == "mysql":
        return MySQLInventoryRepository()
    if backend == "dynamodb":
        return DynamoDBInventoryRepository()
    raise ApplicationError(f"Unknown INVENTORY_STORE_BACKEND: {backend}")


def setup_inventory_webhook_dependencies(
    inventory_repo: IInventoryRepository | None = None,
) -> InventoryWebhookHandler:
    """Initializes and wires up the inventory webhook dependencies."""
    payload_parser = WebhookPayloadParser()
    webhook_validator = ShopifyWebhookValidator(settings.SHOPIFY_WEBHOOK_SECRET)
    webhook_service = InventoryWebhookApplicationService(
        inventory_repo=inventory_repo or create_inventory_repository(),
        webhook_validator=webhook_validator,
        payload_parser=payload_parser,
    )
    return InventoryWebhookHandler(webhook_service=webhook_service, payload_parser=payload_parser)


def create_lambda_handler(webhook_handler: InventoryWebhookHandler) -> LambdaHandler:
    """Returns the API Gateway Lambda function bound to a wired handler."""

    def handler(event: dict, context: Any = None) -> dict:
        return webhook_handler.handle_http_event(event, context)

    return handler


def create_eventbridge_handler(webhook_handler: InventoryWebhookHandler) -> LambdaHandler:
    """Returns the EventBridge Lambda function bound to a wired handler."""

    def handler(event: dict, context: Any = None) -> dict:
        return webhook_handler.handle_eventbridge_event(event, context)

    return handler


def create_inventory_db_tables() -> None:
    """Creates tables for the inventory domain (MySQL backend only)."""
    inventory_repo = MySQLInventoryRepository()
    try:
        inventory_repo.create_tables()
    except PersistenceError as e:
        logger.error(f"Error creating inventory database tables: {e}")
        raise
    finally:
        del inventory_repo


# Wired once per process (cold start); both entry points share the same collaborators
setup_logging()
_webhook_handler = setup_inventory_webhook_dependencies()
handler = create_lambda_handler(_webhook_handler)
eventbridge_handler = create_eventbridge_handler(_webhook_handler)


if __name__ == "__main__":
    logger.info(f"Preparing inventory store (backend: {settings.INVENTORY_STORE_BACKEND})")
    if settings.INVENTORY_STORE_BACKEND.lower() == "mysql":
        create_inventory_db_tables()
    logger.info("Inventory webhook service ready.")
