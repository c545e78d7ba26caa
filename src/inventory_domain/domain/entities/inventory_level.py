"""Inventory Level entity."""

from dataclasses import dataclass
from datetime import datetime

from src.common.dtos.inventory_dtos import InventoryUpdateDTO
from src.common.exceptions.custom_exceptions import ValidationError
from src.common.utils.date_utils import parse_iso_timestamp


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)  # Stock rows are replaced, never mutated
class InventoryLevel:
    """Represents the stock of one variant at one location for a shop."""

    shop_name: str
    variant_id: int
    location_id: int
    available: int
    updated_at: datetime
    inventory_item_id: int | None = None

    def __post_init__(self) -> None:
        """Post-initialization for validation."""
        if not isinstance(self.shop_name, str) or not self.shop_name.strip():
            raise ValidationError("Shop name is required", field="shop_name")
        if not _is_int(self.variant_id) or self.variant_id <= 0:
            raise ValidationError("Variant ID must be positive", field="variant_id")
        if not _is_int(self.location_id) or self.location_id <= 0:
            raise ValidationError("Location ID must be positive", field="location_id")
        if not _is_int(self.available) or self.available < 0:
            raise ValidationError("Available stock cannot be negative", field="available")
        if not isinstance(self.updated_at, datetime):
            raise ValidationError("Updated date must be a valid datetime", field="updated_at")
        if self.inventory_item_id is not None and not _is_int(self.inventory_item_id):
            raise ValidationError("Inventory item ID must be an integer", field="inventory_item_id")

    @classmethod
    def from_webhook(cls, shop_name: str, update: InventoryUpdateDTO) -> "InventoryLevel":
        """
        Builds an entity from a webhook entry.

        The webhook carries no separate variant id, so the inventory item id
        is used as both the variant id and the correlation id.
        """
        updated_at = parse_iso_timestamp(update.updated_at)
        if updated_at is None:
            raise ValidationError(f"Invalid date format for updated_at: {update.updated_at}", field="updated_at")

        return cls(
            shop_name=shop_name,
            variant_id=update.inventory_item_id,
            location_id=update.location_id,
            available=update.available,
            updated_at=updated_at,
            inventory_item_id=update.inventory_item_id,
        )

    @property
    def composite_key(self) -> str:
        """Partition key grouping every location of a shop variant."""
        return f"{self.shop_name}#{self.variant_id}"

    @property
    def location_key(self) -> str:
        return str(self.location_id)

    @staticmethod
    def split_composite_key(composite_key: str) -> tuple[str, int]:
        """Recovers (shop_name, variant_id) from a stored composite key."""
        shop_name, separator, variant_id = composite_key.rpartition("#")
        if not separator or not variant_id.isdigit():
            raise ValidationError(f"Malformed composite key: {composite_key}", field="shop_variant_id")
        return shop_name, int(variant_id)
