# src/inventory_domain/domain/repositories/inventory_repository.py
"""Inventory Level repository interface."""
from abc import ABC, abstractmethod
from typing import Optional

from src.inventory_domain.domain.entities.inventory_level import InventoryLevel


class IInventoryRepository(ABC):

    @abstractmethod
    def save_inventory_level(self, level: InventoryLevel) -> None:
        """Saves or updates a single inventory level keyed on (composite key, location key)."""
        pass

    @abstractmethod
    def batch_save_inventory_levels(self, levels: list[InventoryLevel]) -> None:
        """Saves or updates multiple inventory levels in one operation."""
        pass

    @abstractmethod
    def get_by_shop_and_variant(self, shop_name: str, variant_id: int) -> list[InventoryLevel]:
        """Retrieves the inventory levels of a variant across all locations."""
        pass

    @abstractmethod
    def get_by_shop_variant_and_location(
        self, shop_name: str, variant_id: int, location_id: int
    ) -> Optional[InventoryLevel]:
        """Retrieves the inventory level of a variant at one location."""
        pass
