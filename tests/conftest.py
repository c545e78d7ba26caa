# tests/conftest.py
import base64
import hashlib
import hmac
import json
from datetime import datetime
from unittest.mock import Mock

import pytest
import pytz

from src.common.config.settings import settings
from src.common.dtos.inventory_dtos import InventoryUpdateDTO
from src.inventory_domain.application.inventory_webhook_service import InventoryWebhookApplicationService
from src.inventory_domain.domain.entities.inventory_level import InventoryLevel
from src.inventory_domain.infrastructure.persistence.mysql_inventory_repository import MySQLInventoryRepository
from src.inventory_domain.infrastructure.validators.shopify_webhook_validator import ShopifyWebhookValidator

TEST_SECRET = "test-webhook-secret"
TEST_SHOP = "myshop.myshopify.com"


def sign(body: str, secret: str = TEST_SECRET) -> str:
    """Computes a Shopify-style base64 HMAC-SHA256 signature."""
    digest = hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


@pytest.fixture(autouse=True)
def mock_settings_webhook_info(mocker) -> None:
    """Mocks the webhook secret, topic and table name in settings for consistent testing."""
    mocker.patch.object(settings, "SHOPIFY_WEBHOOK_SECRET", TEST_SECRET)
    mocker.patch.object(settings, "SUPPORTED_WEBHOOK_TOPIC", "inventory_levels/update")
    mocker.patch.object(settings, "INVENTORY_TABLE", "sis_inventory_levels")


@pytest.fixture
def mock_inventory_repository() -> Mock:
    """Mock for MySQLInventoryRepository."""
    return Mock(spec=MySQLInventoryRepository)


@pytest.fixture
def mock_webhook_validator() -> Mock:
    """Mock for ShopifyWebhookValidator that accepts every signature."""
    validator = Mock(spec=ShopifyWebhookValidator)
    validator.validate.return_value = True
    return validator


@pytest.fixture
def inventory_webhook_service(mock_inventory_repository, mock_webhook_validator) -> InventoryWebhookApplicationService:
    """Instance of InventoryWebhookApplicationService with mocked dependencies."""
    return InventoryWebhookApplicationService(
        inventory_repo=mock_inventory_repository, webhook_validator=mock_webhook_validator
    )


@pytest.fixture
def sample_inventory_update_dto_list() -> list[InventoryUpdateDTO]:
    """Three webhook entries for different locations."""
    return [
        InventoryUpdateDTO(inventory_item_id=12345, location_id=789, available=50, updated_at="2024-01-15T10:30:00Z"),
        InventoryUpdateDTO(inventory_item_id=12346, location_id=790, available=100, updated_at="2024-01-15T10:31:00Z"),
        InventoryUpdateDTO(inventory_item_id=12347, location_id=791, available=0, updated_at="2024-01-15T10:32:00Z"),
    ]


@pytest.fixture
def sample_inventory_levels_body() -> str:
    """Raw webhook body with two inventory levels."""
    return json.dumps(
        {
            "inventory_levels": [
                {"inventory_item_id": 12345, "location_id": 789, "available": 50, "updated_at": "2024-01-15T10:30:00Z"},
                {"inventory_item_id": 12346, "location_id": 790, "available": 0, "updated_at": "2024-01-15T10:31:00Z"},
            ]
        }
    )


@pytest.fixture
def sample_inventory_level() -> InventoryLevel:
    """Sample InventoryLevel entity."""
    return InventoryLevel(
        shop_name=TEST_SHOP,
        variant_id=12345,
        location_id=789,
        available=50,
        updated_at=datetime(2024, 1, 15, 10, 30, 0, tzinfo=pytz.utc),
        inventory_item_id=12345,
    )


@pytest.fixture
def sample_eventbridge_event() -> dict:
    """Shopify webhook delivered through an EventBridge partner event bus."""
    return {
        "version": "0",
        "id": "b1c2d3e4-0000-1111-2222-333344445555",
        "detail-type": "shopify.inventory_levels/update",
        "source": "aws.partner/shopify.com/123456/inventory",
        "account": "123456789012",
        "time": "2024-01-15T10:30:05Z",
        "region": "eu-central-1",
        "resources": [],
        "detail": {
            "payload": {
                "inventory_item_id": 12345,
                "location_id": 789,
                "available": 42,
                "updated_at": "2024-01-15T10:30:00Z",
                "admin_graphql_api_id": "gid://shopify/InventoryLevel/789?inventory_item_id=12345",
            },
            "metadata": {
                "X-Shopify-Topic": "inventory_levels/update",
                "X-Shopify-Shop-Domain": TEST_SHOP,
                "X-Shopify-Hmac-SHA256": "placeholder",
            },
        },
    }


@pytest.fixture
def sign_body():
    """Returns a callable computing the signature Shopify would send for a body."""
    return sign
