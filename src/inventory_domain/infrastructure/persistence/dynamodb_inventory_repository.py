# src/inventory_domain/infrastructure/persistence/dynamodb_inventory_repository.py
"""DynamoDB implementation of the Inventory Level repository."""

import logging
from typing import Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from src.common.config.settings import settings
from src.common.exceptions.custom_exceptions import PersistenceError
from src.common.utils.date_utils import format_timestamp_for_store, parse_iso_timestamp
from src.inventory_domain.domain.entities.inventory_level import InventoryLevel
from src.inventory_domain.domain.repositories.inventory_repository import IInventoryRepository

logger = logging.getLogger(__name__)

PARTITION_KEY = "shop_variant_id"
SORT_KEY = "location"


class DynamoDBInventoryRepository(IInventoryRepository):
    """
    Stores one item per (shop_variant_id, location).

    Items carry stock_count, updated_at (ISO-8601), inventory_item_id and
    location_id. Writes are unconditional upserts.
    """

    def __init__(self, table=None, table_name: str | None = None) -> None:
        self._table = table
        self.table_name = table_name or settings.INVENTORY_TABLE

    def _get_table(self):
        """Returns the DynamoDB table resource, creating it on first use."""
        if self._table is None:
            dynamodb = boto3.resource("dynamodb", region_name=settings.AWS_REGION)
            self._table = dynamodb.Table(self.table_name)
        return self._table

    @staticmethod
    def _to_item(level: InventoryLevel) -> dict:
        return {
            PARTITION_KEY: level.composite_key,
            SORT_KEY: level.location_key,
            "stock_count": level.available,
            "updated_at": format_timestamp_for_store(level.updated_at),
            "inventory_item_id": level.inventory_item_id,
            "location_id": level.location_id,
        }

    @staticmethod
    def _item_to_level(item: dict) -> InventoryLevel:
        shop_name, variant_id = InventoryLevel.split_composite_key(item[PARTITION_KEY])
        inventory_item_id = item.get("inventory_item_id")
        # Numbers come back from DynamoDB as Decimal
        return InventoryLevel(
            shop_name=shop_name,
            variant_id=variant_id,
            location_id=int(item["location_id"]),
            available=int(item["stock_count"]),
            updated_at=parse_iso_timestamp(item["updated_at"]),
            inventory_item_id=int(inventory_item_id) if inventory_item_id is not None else None,
        )

    def save_inventory_level(self, level: InventoryLevel) -> None:
        """Saves or updates a single inventory level with UpdateItem."""
        item = self._to_item(level)
        try:
            self._get_table().update_item(
                Key={PARTITION_KEY: item[PARTITION_KEY], SORT_KEY: item[SORT_KEY]},
                UpdateExpression="SET #stock = :stock, #updated = :updated, #item_id = :item_id, #location_id = :location_id",
                ExpressionAttributeNames={
                    "#stock": "stock_count",
                    "#updated": "updated_at",
                    "#item_id": "inventory_item_id",
                    "#location_id": "location_id",
                },
                ExpressionAttributeValues={
                    ":stock": item["stock_count"],
                    ":updated": item["updated_at"],
                    ":item_id": item["inventory_item_id"],
                    ":location_id": item["location_id"],
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise PersistenceError(
                f"Error saving inventory level {level.composite_key} at location {level.location_key}: {e}",
                original_exception=e,
            )

    def batch_save_inventory_levels(self, levels: list[InventoryLevel]) -> None:
        """Saves multiple inventory levels with a batch writer (PutItem requests)."""
        if not levels:
            return

        try:
            # Duplicate keys inside one BatchWriteItem call are rejected by DynamoDB
            with self._get_table().batch_writer(overwrite_by_pkeys=[PARTITION_KEY, SORT_KEY]) as batch:
                for level in levels:
                    batch.put_item(Item=self._to_item(level))
            logger.info(f"Batch saved {len(levels)} inventory levels to {self.table_name}")
        except (ClientError, BotoCoreError) as e:
            raise PersistenceError(f"Error batch saving inventory levels: {e}", original_exception=e)

    def get_by_shop_and_variant(self, shop_name: str, variant_id: int) -> list[InventoryLevel]:
        """Queries every location stored under the shop variant partition."""
        composite_key = f"{shop_name}#{variant_id}"
        items: list[dict] = []
        query_kwargs = {"KeyConditionExpression": Key(PARTITION_KEY).eq(composite_key)}

        try:
            while True:
                response = self._get_table().query(**query_kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                query_kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            raise PersistenceError(f"Error fetching inventory levels for {composite_key}: {e}", original_exception=e)

        return [self._item_to_level(item) for item in items]

    def get_by_shop_variant_and_location(
        self, shop_name: str, variant_id: int, location_id: int
    ) -> Optional[InventoryLevel]:
        """Reads a single item by its full key."""
        composite_key = f"{shop_name}#{variant_id}"
        try:
            response = self._get_table().get_item(Key={PARTITION_KEY: composite_key, SORT_KEY: str(location_id)})
        except (ClientError, BotoCoreError) as e:
            raise PersistenceError(
                f"Error fetching inventory level for {composite_key} at location {location_id}: {e}",
                original_exception=e,
            )

        item = response.get("Item")
        return self._item_to_level(item) if item else None
