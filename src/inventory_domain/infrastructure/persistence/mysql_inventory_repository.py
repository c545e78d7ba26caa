# src/inventory_domain/infrastructure/persistence/mysql_inventory_repository.py
"""MySQL implementation of the Inventory Level repository."""

import logging
from typing import Optional

import mysql.connector
from mysql.connector import Error

from src.common.config.settings import settings
from src.common.exceptions.custom_exceptions import PersistenceError
from src.common.utils.date_utils import format_timestamp_for_store, parse_iso_timestamp
from src.inventory_domain.domain.entities.inventory_level import InventoryLevel
from src.inventory_domain.domain.repositories.inventory_repository import IInventoryRepository

logger = logging.getLogger(__name__)


class MySQLInventoryRepository(IInventoryRepository):
    """MySQL implementation of the Inventory Level Repository."""

    def __init__(self, table_name: str | None = None) -> None:
        """Initializes the repository."""
        self._connection = None
        self.table_name = table_name or settings.INVENTORY_TABLE

    def _get_connection(self):
        """Establishes or returns an active MySQL database connection."""
        if not self._connection or not self._connection.is_connected():
            try:
                self._connection = mysql.connector.connect(
                    host=settings.DB_HOST,
                    database=settings.DB_DATABASE,
                    user=settings.DB_USER,
                    password=settings.DB_PASSWORD,
                    autocommit=False,
                    charset="utf8mb4",
                    use_unicode=True,
                )
            except Error as e:
                raise PersistenceError(f"Failed to connect to MySQL: {e}", original_exception=e)
        return self._connection

    def create_tables(self) -> None:
        """Creates the inventory level table keyed on (shop_variant_id, location)."""
        create_inventory_table_query = f"""
        CREATE TABLE IF NOT EXISTS {self.table_name} (
            shop_variant_id VARCHAR(320) NOT NULL,
            location VARCHAR(32) NOT NULL,
            stock_count INT UNSIGNED NOT NULL,
            updated_at VARCHAR(32) NOT NULL,
            inventory_item_id BIGINT UNSIGNED,
            location_id BIGINT UNSIGNED NOT NULL,
            date_synced DATETIME DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
            PRIMARY KEY (shop_variant_id, location)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;
        """
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(create_inventory_table_query)
            conn.commit()
            logger.info(f"Inventory table {self.table_name} checked/created.")
        except Error as e:
            conn.rollback()
            raise PersistenceError(f"Error creating inventory table {self.table_name}: {e}", original_exception=e)
        finally:
            cursor.close()

    def _upsert_query(self) -> str:
        # Last write wins: a redelivered or later event overwrites the row
        return f"""
        INSERT INTO {self.table_name}
        (shop_variant_id, location, stock_count, updated_at, inventory_item_id, location_id)
        VALUES (%s, %s, %s, %s, %s, %s)
        ON DUPLICATE KEY UPDATE
        stock_count = VALUES(stock_count),
        updated_at = VALUES(updated_at),
        inventory_item_id = VALUES(inventory_item_id),
        location_id = VALUES(location_id),
        date_synced = CURRENT_TIMESTAMP
        """

    @staticmethod
    def _to_params(level: InventoryLevel) -> tuple:
        return (
            level.composite_key,
            level.location_key,
            level.available,
            format_timestamp_for_store(level.updated_at),
            level.inventory_item_id,
            level.location_id,
        )

    def save_inventory_level(self, level: InventoryLevel) -> None:
        """Saves or updates a single inventory level."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            cursor.execute(self._upsert_query(), self._to_params(level))
            conn.commit()
        except Error as e:
            conn.rollback()
            raise PersistenceError(
                f"Error saving inventory level {level.composite_key} at location {level.location_key}: {e}",
                original_exception=e,
            )
        finally:
            cursor.close()

    def batch_save_inventory_levels(self, levels: list[InventoryLevel]) -> None:
        """
        Saves multiple inventory levels in a single transaction.
        Uses executemany; either every row is written or none is.
        """
        if not levels:
            return

        conn = self._get_connection()
        cursor = conn.cursor()
        params_list = [self._to_params(level) for level in levels]

        try:
            cursor.executemany(self._upsert_query(), params_list)
            conn.commit()
            logger.info(f"Batch saved {len(levels)} inventory levels")
        except Error as e:
            conn.rollback()
            raise PersistenceError(f"Error batch saving inventory levels: {e}", original_exception=e)
        finally:
            cursor.close()

    @staticmethod
    def _row_to_level(row: dict) -> InventoryLevel:
        shop_name, variant_id = InventoryLevel.split_composite_key(row["shop_variant_id"])
        return InventoryLevel(
            shop_name=shop_name,
            variant_id=variant_id,
            location_id=int(row["location_id"]),
            available=int(row["stock_count"]),
            updated_at=parse_iso_timestamp(row["updated_at"]),
            inventory_item_id=row["inventory_item_id"],
        )

    def get_by_shop_and_variant(self, shop_name: str, variant_id: int) -> list[InventoryLevel]:
        """Retrieves the inventory levels of a variant across all locations."""
        conn = self._get_connection()
        cursor = conn.cursor(dictionary=True)
        composite_key = f"{shop_name}#{variant_id}"

        try:
            query = f"""
            SELECT shop_variant_id, location, stock_count, updated_at, inventory_item_id, location_id
            FROM {self.table_name}
            WHERE shop_variant_id = %s
            ORDER BY location_id
            """
            cursor.execute(query, (composite_key,))
            rows = cursor.fetchall()
            return [self._row_to_level(row) for row in rows]
        except Error as e:
            raise PersistenceError(f"Error fetching inventory levels for {composite_key}: {e}", original_exception=e)
        finally:
            cursor.close()

    def get_by_shop_variant_and_location(
        self, shop_name: str, variant_id: int, location_id: int
    ) -> Optional[InventoryLevel]:
        """Retrieves the inventory level of a variant at one location."""
        conn = self._get_connection()
        cursor = conn.cursor(dictionary=True)
        composite_key = f"{shop_name}#{variant_id}"
        level = None
        try:
            query = f"""
            SELECT shop_variant_id, location, stock_count, updated_at, inventory_item_id, location_id
            FROM {self.table_name}
            WHERE shop_variant_id = %s AND location = %s
            LIMIT 1
            """
            cursor.execute(query, (composite_key, str(location_id)))
            row = cursor.fetchone()
            if row:
                level = self._row_to_level(row)
        except Error as e:
            raise PersistenceError(
                f"Error fetching inventory level for {composite_key} at location {location_id}: {e}",
                original_exception=e,
            )
        finally:
            cursor.close()
        return level

    def __del__(self) -> None:
        """Closes the database connection when the object is destroyed."""
        if self._connection and self._connection.is_connected():
            self._connection.close()
