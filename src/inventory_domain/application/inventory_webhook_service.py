# src/inventory_domain/application/inventory_webhook_service.py
"""Application service processing Shopify inventory level webhooks."""

import logging
from typing import Optional

from src.common.dtos.inventory_dtos import (
    InventoryUpdateDTO,
    ItemErrorDTO,
    ProcessInventoryWebhookRequestDTO,
    ProcessInventoryWebhookResultDTO,
)
from src.common.exceptions.custom_exceptions import AuthenticationError, ValidationError
from src.inventory_domain.domain.entities.inventory_level import InventoryLevel
from src.inventory_domain.domain.repositories.inventory_repository import IInventoryRepository
from src.inventory_domain.domain.validators.webhook_validator import IWebhookValidator
from src.inventory_domain.infrastructure.parsers.webhook_payload_parser import WebhookPayloadParser

logger = logging.getLogger(__name__)


class InventoryWebhookApplicationService:
    """Verifies, validates and persists inventory level updates."""

    def __init__(
        self,
        inventory_repo: IInventoryRepository,
        webhook_validator: IWebhookValidator,
        payload_parser: WebhookPayloadParser | None = None,
    ) -> None:
        """Initializes the InventoryWebhookApplicationService."""
        self.inventory_repo = inventory_repo
        self.webhook_validator = webhook_validator
        self.payload_parser = payload_parser or WebhookPayloadParser()

    def execute(self, request: ProcessInventoryWebhookRequestDTO) -> ProcessInventoryWebhookResultDTO:
        """
        Runs one webhook through verify -> validate -> transform -> persist.

        Raises:
            AuthenticationError: the signature does not match the raw body.
            ValidationError: the shop name, payload or any single entry is invalid.
                Nothing is persisted in that case.

        Persistence failures never raise; they are reported per batch index.
        """
        if not self.webhook_validator.validate(request.raw_body, request.signature):
            logger.warning(f"Webhook signature verification failed for shop {request.shop_name!r}")
            raise AuthenticationError()

        inventory_levels = request.inventory_levels
        if inventory_levels is None:
            inventory_levels = self.payload_parser.parse_inventory_levels(request.raw_body)

        self._validate_request(request.shop_name, inventory_levels)
        levels = self._transform_to_entities(request.shop_name, inventory_levels)

        result = self._save_inventory_levels(levels)
        logger.info(
            f"Processed inventory webhook for {request.shop_name}: "
            f"{result.processed_count}/{len(levels)} saved, {len(result.errors)} failed"
        )
        return result

    @staticmethod
    def _validate_request(shop_name: str, inventory_levels: list[InventoryUpdateDTO]) -> None:
        if not isinstance(shop_name, str) or not shop_name.strip():
            raise ValidationError("Shop name is required", field="shop_name")

        if not isinstance(inventory_levels, list):
            raise ValidationError("Invalid payload: inventory levels must be a list", field="inventory_levels")

        if not inventory_levels:
            raise ValidationError("Invalid payload: inventory levels cannot be empty", field="inventory_levels")

    @staticmethod
    def _transform_to_entities(shop_name: str, inventory_levels: list[InventoryUpdateDTO]) -> list[InventoryLevel]:
        levels = []
        for index, update in enumerate(inventory_levels):
            try:
                levels.append(InventoryLevel.from_webhook(shop_name, update))
            except ValidationError as e:
                raise ValidationError(
                    f"Invalid inventory level at index {index}: {e.message}", field=e.field, index=index
                ) from e
        return levels

    def _save_inventory_levels(self, levels: list[InventoryLevel]) -> ProcessInventoryWebhookResultDTO:
        """
        Saves the whole batch at once, falling back to one save per level.

        The fallback runs in input order so reported indexes match the
        positions in the original webhook.
        """
        errors: list[ItemErrorDTO] = []
        success_count = 0

        try:
            self.inventory_repo.batch_save_inventory_levels(levels)
            success_count = len(levels)
        except Exception as batch_error:
            logger.warning(f"Batch save of {len(levels)} inventory levels failed, saving individually: {batch_error}")
            for index, level in enumerate(levels):
                try:
                    self.inventory_repo.save_inventory_level(level)
                    success_count += 1
                except Exception as e:
                    logger.warning(
                        f"Failed to save inventory level {index} ({level.composite_key} @ {level.location_key}): {e}"
                    )
                    errors.append(ItemErrorDTO(index=index, reason=str(e) or "Unknown error"))

        return ProcessInventoryWebhookResultDTO(
            success=not errors,
            processed_count=success_count,
            errors=errors,
        )

    def get_inventory_levels(self, shop_name: str, variant_id: int) -> list[InventoryLevel]:
        """Retrieves the stored levels of a variant across all locations."""
        return self.inventory_repo.get_by_shop_and_variant(shop_name, variant_id)

    def get_inventory_level(self, shop_name: str, variant_id: int, location_id: int) -> Optional[InventoryLevel]:
        """Retrieves the stored level of a variant at one location."""
        return self.inventory_repo.get_by_shop_variant_and_location(shop_name, variant_id, location_id)
