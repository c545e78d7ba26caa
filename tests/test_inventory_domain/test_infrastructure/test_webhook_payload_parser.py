# tests/test_inventory_domain/test_infrastructure/test_webhook_payload_parser.py

import json

import pytest

from src.common.dtos.inventory_dtos import (
    EventBridgeWebhookPayload,
    HttpWebhookPayload,
    InventoryUpdateDTO,
)
from src.common.exceptions.custom_exceptions import PayloadParseError, ValidationError
from src.inventory_domain.infrastructure.parsers.webhook_payload_parser import WebhookPayloadParser


@pytest.fixture
def parser() -> WebhookPayloadParser:
    return WebhookPayloadParser()


def valid_level(**overrides) -> dict:
    level = {"inventory_item_id": 12345, "location_id": 789, "available": 50, "updated_at": "2024-01-15T10:30:00Z"}
    level.update(overrides)
    return level


# --- parse_inventory_levels ---


def test_parse_inventory_levels_returns_dtos(parser, sample_inventory_levels_body) -> None:
    result = parser.parse_inventory_levels(sample_inventory_levels_body)

    assert result == [
        InventoryUpdateDTO(inventory_item_id=12345, location_id=789, available=50, updated_at="2024-01-15T10:30:00Z"),
        InventoryUpdateDTO(inventory_item_id=12346, location_id=790, available=0, updated_at="2024-01-15T10:31:00Z"),
    ]


def test_parse_inventory_levels_ignores_extra_fields(parser) -> None:
    body = json.dumps({"inventory_levels": [valid_level(admin_graphql_api_id="gid://x")]})

    assert len(parser.parse_inventory_levels(body)) == 1


def test_parse_inventory_levels_accepts_empty_array(parser) -> None:
    # Emptiness is rejected by the pipeline, not the parser
    assert parser.parse_inventory_levels('{"inventory_levels": []}') == []


def test_parse_inventory_levels_rejects_invalid_json(parser) -> None:
    with pytest.raises(PayloadParseError, match="Invalid JSON in webhook body"):
        parser.parse_inventory_levels("{not json")


@pytest.mark.parametrize("body", ['{"other": []}', '{"inventory_levels": {}}', "[]", '"text"'])
def test_parse_inventory_levels_rejects_missing_array(parser, body) -> None:
    with pytest.raises(ValidationError, match="missing or invalid inventory_levels array") as exc_info:
        parser.parse_inventory_levels(body)

    assert not isinstance(exc_info.value, PayloadParseError)


def test_parse_inventory_levels_reports_non_object_entry(parser) -> None:
    body = json.dumps({"inventory_levels": [valid_level(), "oops"]})

    with pytest.raises(ValidationError, match="Invalid inventory level at index 1: not an object") as exc_info:
        parser.parse_inventory_levels(body)

    assert exc_info.value.index == 1


@pytest.mark.parametrize(
    "field,value,message",
    [
        ("inventory_item_id", "12345", "Invalid inventory_item_id at index 2: must be an integer"),
        ("location_id", None, "Invalid location_id at index 2: must be an integer"),
        ("available", 1.5, "Invalid available at index 2: must be an integer"),
        ("available", True, "Invalid available at index 2: must be an integer"),
        ("updated_at", 1705314600, r"Invalid updated_at at index 2: must be a string \(ISO 8601\)"),
    ],
)
def test_parse_inventory_levels_reports_offending_field_and_index(parser, field, value, message) -> None:
    body = json.dumps({"inventory_levels": [valid_level(), valid_level(), valid_level(**{field: value})]})

    with pytest.raises(ValidationError, match=message) as exc_info:
        parser.parse_inventory_levels(body)

    assert exc_info.value.field == field
    assert exc_info.value.index == 2


def test_parse_inventory_levels_reports_missing_field(parser) -> None:
    level = valid_level()
    del level["updated_at"]

    with pytest.raises(ValidationError, match="Invalid updated_at at index 0"):
        parser.parse_inventory_levels(json.dumps({"inventory_levels": [level]}))


# --- header helpers ---


@pytest.mark.parametrize(
    "headers",
    [
        {"x-shopify-shop-domain": "myshop.myshopify.com"},
        {"X-Shopify-Shop-Domain": "myshop.myshopify.com"},
        {"X-SHOPIFY-SHOP-DOMAIN": "myshop.myshopify.com"},
    ],
)
def test_extract_shop_name_is_case_insensitive(parser, headers) -> None:
    assert parser.extract_shop_name(headers) == "myshop.myshopify.com"


@pytest.mark.parametrize("headers", [{}, {"x-shopify-topic": "inventory_levels/update"}, None])
def test_extract_shop_name_requires_header(parser, headers) -> None:
    with pytest.raises(ValidationError, match="unable to extract shop name"):
        parser.extract_shop_name(headers)


def test_extract_topic(parser) -> None:
    assert parser.extract_topic({"X-Shopify-Topic": "inventory_levels/update"}) == "inventory_levels/update"
    assert parser.extract_topic({"x-shopify-topic": "orders/create"}) == "orders/create"


def test_extract_topic_defaults_to_unknown(parser) -> None:
    assert parser.extract_topic({}) == "unknown"


def test_extract_signature(parser) -> None:
    assert parser.extract_signature({"X-Shopify-Hmac-SHA256": "abc="}) == "abc="
    assert parser.extract_signature({"x-shopify-hmac-sha256": "def="}) == "def="
    assert parser.extract_signature({"x-shopify-topic": "t"}) is None


# --- parse_event_envelope ---


def test_parse_event_envelope(parser, sample_eventbridge_event) -> None:
    result = parser.parse_event_envelope(sample_eventbridge_event)

    assert result.inventory_update == InventoryUpdateDTO(
        inventory_item_id=12345, location_id=789, available=42, updated_at="2024-01-15T10:30:00Z"
    )
    assert result.headers["X-Shopify-Shop-Domain"] == "myshop.myshopify.com"
    assert json.loads(result.raw_body) == sample_eventbridge_event["detail"]["payload"]


def test_parse_event_envelope_raw_body_is_compact_json(parser, sample_eventbridge_event) -> None:
    sample_eventbridge_event["detail"]["payload"]["location_name"] = "Lager München"

    result = parser.parse_event_envelope(sample_eventbridge_event)

    assert result.raw_body == (
        '{"inventory_item_id":12345,"location_id":789,"available":42,"updated_at":"2024-01-15T10:30:00Z",'
        '"admin_graphql_api_id":"gid://shopify/InventoryLevel/789?inventory_item_id=12345",'
        '"location_name":"Lager München"}'
    )


@pytest.mark.parametrize("event", [None, "event", [], {}])
def test_parse_event_envelope_rejects_non_envelope(parser, event) -> None:
    with pytest.raises(ValidationError, match="Invalid EventBridge event"):
        parser.parse_event_envelope(event)


def test_parse_event_envelope_rejects_missing_detail(parser, sample_eventbridge_event) -> None:
    sample_eventbridge_event["detail"] = None

    with pytest.raises(ValidationError, match="detail must be an object"):
        parser.parse_event_envelope(sample_eventbridge_event)


def test_parse_event_envelope_rejects_bad_metadata(parser, sample_eventbridge_event) -> None:
    sample_eventbridge_event["detail"]["metadata"] = {"X-Shopify-Topic": 42}

    with pytest.raises(ValidationError, match="metadata must map header names to strings"):
        parser.parse_event_envelope(sample_eventbridge_event)


def test_parse_event_envelope_rejects_bad_payload(parser, sample_eventbridge_event) -> None:
    sample_eventbridge_event["detail"]["payload"]["available"] = "42"

    with pytest.raises(ValidationError, match="Invalid available"):
        parser.parse_event_envelope(sample_eventbridge_event)


# --- parse_webhook ---


def test_parse_webhook_http_defers_body_parsing(parser) -> None:
    payload = HttpWebhookPayload(
        raw_body="{not even json",
        headers={
            "X-Shopify-Shop-Domain": "myshop.myshopify.com",
            "X-Shopify-Topic": "inventory_levels/update",
            "X-Shopify-Hmac-SHA256": "sig=",
        },
    )

    result = parser.parse_webhook(payload)

    assert result.shop_name == "myshop.myshopify.com"
    assert result.topic == "inventory_levels/update"
    assert result.signature == "sig="
    assert result.raw_body == "{not even json"
    assert result.inventory_levels is None


def test_parse_webhook_eventbridge(parser, sample_eventbridge_event) -> None:
    result = parser.parse_webhook(EventBridgeWebhookPayload(event=sample_eventbridge_event))

    assert result.shop_name == "myshop.myshopify.com"
    assert result.topic == "inventory_levels/update"
    assert result.signature == "placeholder"
    assert len(result.inventory_levels) == 1
    assert result.inventory_levels[0].available == 42


def test_parse_webhook_rejects_unknown_variant(parser) -> None:
    with pytest.raises(ValidationError, match="Unsupported webhook payload type: dict"):
        parser.parse_webhook({"body": "{}"})
